"""
Container assembly pipeline.

Builds the service container from the built-in service definitions, an
optional user configuration file and the cache file, in that order, so each
source can override the previous one.
"""
import dataclasses
import os
from dataclasses import dataclass, field
from typing import Optional

from deptrac._package import DEFAULT_CACHE_FILE, EXTENSION_ALIAS, INTERNAL_CONFIG_PATH
from deptrac.infrastructure.di.cache_loader import CacheLoader
from deptrac.infrastructure.di.cache_policy import CacheDecision, CacheLocationPolicy, CacheOverride
from deptrac.infrastructure.di.compiler_passes import AddConsoleCommandPass, RegisterListenersPass
from deptrac.infrastructure.di.configuration_loader import ConfigurationLoader
from deptrac.infrastructure.di.container import DIContainer, timed_operation
from deptrac.infrastructure.di.extension import DeptracExtension
from deptrac.infrastructure.di.loaders import FileLocator, PythonFileLoader
from deptrac.infrastructure.di.paths import PathResolver
from deptrac.infrastructure.exceptions import CannotLoadConfigurationError, InfrastructureError
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

SERVICE_DEFINITIONS = "services.py"


@dataclass(frozen=True)
class ContainerAssembler:
    """
    Builds a compiled ``DIContainer`` for one working directory.

    Instances are immutable: ``with_config`` returns a new assembler, so one
    assembler can be reused to build containers for different configuration
    files.

    Usage:
        assembler = ContainerAssembler("/project").with_config("deptrac.yaml")
        container = assembler.build(CacheOverride.unset(), clear_cache=False)
    """

    working_directory: str
    config_file: Optional[str] = None
    path_resolver: PathResolver = field(default_factory=PathResolver, repr=False, compare=False)

    def __post_init__(self):
        working_directory = os.fspath(self.working_directory) if self.working_directory is not None else ""
        if not working_directory:
            raise ValueError("The working directory must not be empty")
        if not os.path.isabs(working_directory):
            raise ValueError(f'The working directory must be absolute, "{working_directory}" given')
        object.__setattr__(self, "working_directory", working_directory)

    def with_config(self, config_file: Optional[str]) -> "ContainerAssembler":
        """
        Return an assembler that also loads ``config_file``.

        Relative paths are resolved against the working directory. ``None``
        returns this assembler unchanged.
        """
        if config_file is None:
            return self
        resolved = self.path_resolver.resolve(os.fspath(config_file), self.working_directory)
        return dataclasses.replace(self, config_file=resolved)

    def build(self, cache_override: Optional[CacheOverride] = None, clear_cache: bool = False) -> DIContainer:
        """
        Assemble and compile the container.

        Args:
            cache_override: Explicit cache setting; ``None`` means unset
            clear_cache: Delete the decided cache file before loading it

        Returns:
            Compiled, read-only container

        Raises:
            CannotLoadConfigurationError: If services, configuration or cache definitions fail to load
            CacheFileError: If the cache file cannot be created, written or removed
        """
        with timed_operation("Build container"):
            try:
                return self._build(cache_override, clear_cache)
            except InfrastructureError as e:
                logger.error("Container build failed", error=str(e), details=e.details)
                raise

    def _build(self, cache_override: Optional[CacheOverride], clear_cache: bool) -> DIContainer:
        container = DIContainer()
        container.set_parameter("currentWorkingDirectory", self.working_directory)
        container.set_parameter("projectDirectory", self.working_directory)

        self._register_compiler_passes(container)

        container.register_extension(DeptracExtension())

        self._load_services(container)

        if self.config_file is not None:
            logger.debug("Loading user configuration", config_file=self.config_file)
            ConfigurationLoader().load(container, self.config_file)

        policy = CacheLocationPolicy(self.working_directory, self.path_resolver)
        decision = policy.decide(cache_override, self._configured_cache_file(container), DEFAULT_CACHE_FILE)

        if not decision.is_disabled:
            if clear_cache:
                policy.clear(decision.path)
            self._load_cache(container, decision)

        container.compile()
        logger.debug("Container built", working_directory=self.working_directory, config_file=self.config_file)
        return container

    @staticmethod
    def _register_compiler_passes(container: DIContainer) -> None:
        container.add_compiler_pass(AddConsoleCommandPass())
        container.add_compiler_pass(RegisterListenersPass())

    @staticmethod
    def _load_services(container: DIContainer) -> None:
        loader = PythonFileLoader(container, FileLocator([str(INTERNAL_CONFIG_PATH)]))
        try:
            loader.load(SERVICE_DEFINITIONS)
        except Exception as e:
            raise CannotLoadConfigurationError.from_services(SERVICE_DEFINITIONS, str(e)) from e

    @staticmethod
    def _configured_cache_file(container: DIContainer) -> Optional[str]:
        """``cache_file`` of the first loaded extension fragment, later fragments are ignored."""
        fragments = container.get_extension_config(EXTENSION_ALIAS)
        if not fragments:
            return None
        return fragments[0].get("cache_file")

    @staticmethod
    def _load_cache(container: DIContainer, decision: CacheDecision) -> None:
        cache_loader = CacheLoader()
        cache_loader.ensure_exists(decision.path)
        cache_loader.load(container, decision.path)
