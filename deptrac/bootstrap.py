"""Application bootstrap - container assembly entry point."""

from __future__ import annotations

import os
from typing import Any, Optional, Union

from deptrac.config.schemas.logging_schema import LoggingConfig
from deptrac.infrastructure.di.assembler import ContainerAssembler
from deptrac.infrastructure.di.cache_policy import CacheOverride
from deptrac.infrastructure.di.container import DIContainer
from deptrac.infrastructure.exceptions import (
    CacheFileError,
    CannotLoadConfigurationError,
    InfrastructureError,
)
from deptrac.infrastructure.logging.logger import get_logger, setup_logging


class Application:
    """Builds the container once and hands out services from it."""

    def __init__(
        self,
        working_directory: Optional[str] = None,
        config_path: Optional[str] = None,
        logging_config: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize the instance."""
        self.working_directory = os.path.abspath(working_directory or os.getcwd())
        self.config_path = config_path
        self.logging_config = logging_config
        self.last_error: Optional[InfrastructureError] = None

        self._container: Optional[DIContainer] = None
        self._initialized = False

        self.logger = get_logger(__name__)

    @property
    def container(self) -> DIContainer:
        if not self._initialized or self._container is None:
            raise RuntimeError("Application not initialized")
        return self._container

    def initialize(
        self,
        cache_override: Union[None, bool, str, CacheOverride] = None,
        clear_cache: bool = False,
    ) -> bool:
        """
        Configure logging and build the container.

        Args:
            cache_override: ``CacheOverride``, or ``None``/``False``/a path
                converted with ``CacheOverride.from_value``
            clear_cache: Remove the cache file before loading it

        Returns:
            True on success. On failure the error is kept on ``last_error``.
        """
        setup_logging(self.logging_config)

        if not isinstance(cache_override, CacheOverride):
            cache_override = CacheOverride.from_value(cache_override)

        assembler = ContainerAssembler(self.working_directory).with_config(self.config_path)
        self.logger.info(
            "Initializing application",
            working_directory=self.working_directory,
            config_file=assembler.config_file,
        )

        try:
            self._container = assembler.build(cache_override, clear_cache)
        except CannotLoadConfigurationError as e:
            self._fail(e, e.source.value, e.file_name, e.underlying_message)
            return False
        except CacheFileError as e:
            self._fail(e, "cache", e.path, e.message)
            return False
        except InfrastructureError as e:
            self._fail(e, "container", assembler.config_file, e.message)
            return False

        self.last_error = None
        self._initialized = True
        self.logger.info("Application initialized")
        return True

    def _fail(self, error: InfrastructureError, stage: str, file_name: Optional[str], message: str) -> None:
        self.last_error = error
        self._container = None
        self._initialized = False
        self.logger.error(
            "Failed to initialize application",
            stage=stage,
            file=file_name,
            message=message,
        )

    def get(self, service_id: str) -> Any:
        """Get a service from the compiled container."""
        return self.container.get(service_id)

    def get_parameter(self, name: str) -> Any:
        return self.container.get_parameter(name)

    def shutdown(self) -> None:
        """Shutdown the application."""
        self.logger.info("Shutting down application")
        self._container = None
        self._initialized = False

    def __enter__(self) -> "Application":
        if not self.initialize():
            raise RuntimeError(f"Failed to initialize application: {self.last_error}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def create_application(
    working_directory: Optional[str] = None,
    config_path: Optional[str] = None,
    cache_override: Union[None, bool, str, CacheOverride] = None,
) -> Application:
    """Create and initialize an application, raising if the container cannot be built."""
    app = Application(working_directory, config_path)
    if not app.initialize(cache_override):
        raise app.last_error
    return app
