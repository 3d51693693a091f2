"""Creates the cache file and loads the cache service definitions."""

import os
from typing import TYPE_CHECKING, Optional

from deptrac._package import INTERNAL_CONFIG_PATH
from deptrac.infrastructure.di.loaders import FileLocator, PythonFileLoader
from deptrac.infrastructure.exceptions import CacheFileError, CannotLoadConfigurationError
from deptrac.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer

logger = get_logger(__name__)

CACHE_DEFINITIONS = "cache.py"


class CacheLoader:
    """Prepares the cache artifact and wires it into the container."""

    def __init__(self, internal_config_path: Optional[str] = None):
        self.internal_config_path = os.fspath(internal_config_path or INTERNAL_CONFIG_PATH)

    def ensure_exists(self, path: str) -> None:
        """
        Create an empty cache file, and its parent directories, when missing.

        Raises:
            CacheFileError: If the directory or file cannot be created, or the
                new file is not writable
        """
        if os.path.exists(path):
            return

        directory = os.path.dirname(path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create cache directory {directory}: {e}")
            raise CacheFileError.not_writable(path, str(e)) from e

        try:
            with open(path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            logger.error(f"Failed to create cache file {path}: {e}")
            raise CacheFileError.not_writable(path, str(e)) from e

        if not os.access(path, os.W_OK):
            raise CacheFileError.not_writable(path)

        logger.info("Created cache file", cache_file=path)

    def load(self, container: "DIContainer", path: str) -> None:
        """
        Point the ``cache_file`` parameter at ``path`` and load the cache definitions.

        Raises:
            CannotLoadConfigurationError: If the cache definitions fail to load
        """
        container.set_parameter("cache_file", path)

        loader = PythonFileLoader(container, FileLocator([self.internal_config_path]))
        try:
            loader.load(CACHE_DEFINITIONS)
        except Exception as e:
            logger.error(f"Failed to load cache definitions: {e}")
            raise CannotLoadConfigurationError.from_cache(CACHE_DEFINITIONS, str(e)) from e
