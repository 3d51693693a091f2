"""Loader plumbing shared by the YAML and Python configuration loaders."""

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence

from deptrac.infrastructure.di.exceptions import LoaderError, LoaderLoadError
from deptrac.infrastructure.di.loaders.locator import FileLocator
from deptrac.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer

logger = get_logger(__name__)


class FileLoader(ABC):
    """Base class for loaders reading a file into the container."""

    extensions: Sequence[str] = ()

    def __init__(self, container: "DIContainer", locator: FileLocator):
        self.container = container
        self.locator = locator
        self.resolver: Optional["LoaderResolver"] = None
        self._loading: List[str] = []

    def supports(self, resource: str) -> bool:
        return isinstance(resource, str) and resource.lower().endswith(tuple(self.extensions))

    def load(self, resource: str, current_path: Optional[str] = None) -> None:
        """
        Locate and load a resource.

        Args:
            resource: File name or path
            current_path: Directory of the file importing this resource

        Raises:
            LoaderError: If the file cannot be found, parsed or registered
        """
        path = self.locator.locate(resource, current_path)
        loading = self.resolver.loading if self.resolver else self._loading

        if path in loading:
            chain = " > ".join(loading + [path])
            raise LoaderLoadError(f'Circular reference detected in "{resource}" ("{chain}").')

        loading.append(path)
        try:
            logger.debug(f"Loading {path} with {type(self).__name__}")
            self.container.add_resource(path)
            self._load_file(path)
        finally:
            loading.pop()

    @abstractmethod
    def _load_file(self, path: str) -> None:
        """Parse the located file and register its contents."""

    def import_resource(self, resource: str, source_path: str, ignore_errors: bool = False) -> None:
        """
        Load another resource relative to the file currently being loaded.

        The resolver picks the loader, so YAML files may import Python files
        and the other way around.
        """
        current_dir = os.path.dirname(source_path)
        try:
            loader = self.resolver.resolve(resource) if self.resolver else self
            if loader is None or not loader.supports(resource):
                raise LoaderLoadError(f'Cannot load resource "{resource}" imported from "{source_path}".')
            loader.load(resource, current_dir)
        except LoaderError:
            if ignore_errors:
                logger.info(f"Ignoring failed import of {resource} from {source_path}")
                return
            raise


class LoaderResolver:
    """Selects the loader that supports a resource."""

    def __init__(self, loaders: Sequence[FileLoader]):
        self.loaders: List[FileLoader] = []
        self.loading: List[str] = []
        for loader in loaders:
            self.add_loader(loader)

    def add_loader(self, loader: FileLoader) -> None:
        loader.resolver = self
        self.loaders.append(loader)

    def resolve(self, resource: str) -> Optional[FileLoader]:
        for loader in self.loaders:
            if loader.supports(resource):
                return loader
        return None


class DelegatingLoader:
    """Loads a resource with whichever registered loader supports it."""

    def __init__(self, resolver: LoaderResolver):
        self.resolver = resolver

    def supports(self, resource: str) -> bool:
        return self.resolver.resolve(resource) is not None

    def load(self, resource: str) -> None:
        loader = self.resolver.resolve(resource)
        if loader is None:
            supported = sorted({ext for item in self.resolver.loaders for ext in item.extensions})
            raise LoaderLoadError(
                f'Cannot load resource "{resource}". Supported file types: {", ".join(supported)}.'
            )
        loader.load(resource)
