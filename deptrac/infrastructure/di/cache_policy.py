"""Decides where the cache file lives, or whether caching is disabled."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from deptrac._package import DEFAULT_CACHE_FILE
from deptrac.infrastructure.di.paths import PathResolver
from deptrac.infrastructure.exceptions import CacheFileError
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


class CacheOverrideKind(str, Enum):
    UNSET = "unset"
    DISABLED = "disabled"
    PATH = "path"


@dataclass(frozen=True)
class CacheOverride:
    """
    Caller supplied cache setting passed to ``ContainerAssembler.build``.

    ``UNSET`` defers to the configuration file and then the default file
    name, ``DISABLED`` turns caching off, ``PATH`` forces a location.
    """

    kind: CacheOverrideKind = CacheOverrideKind.UNSET
    path: Optional[str] = None

    def __post_init__(self):
        if (self.kind is CacheOverrideKind.PATH) != bool(self.path):
            raise ValueError("A cache path is required for, and only allowed with, a PATH override")

    @classmethod
    def unset(cls) -> "CacheOverride":
        return cls(CacheOverrideKind.UNSET)

    @classmethod
    def disabled(cls) -> "CacheOverride":
        return cls(CacheOverrideKind.DISABLED)

    @classmethod
    def to_path(cls, path: Union[str, "os.PathLike[str]"]) -> "CacheOverride":
        return cls(CacheOverrideKind.PATH, os.fspath(path))

    @classmethod
    def from_value(cls, value: Union[None, bool, str, "os.PathLike[str]"]) -> "CacheOverride":
        """Map ``None`` to UNSET, ``False`` to DISABLED and a path to PATH."""
        if value is None:
            return cls.unset()
        if value is False:
            return cls.disabled()
        if value is True:
            raise ValueError("True is not a valid cache override, pass a path instead")
        return cls.to_path(value)

    @property
    def is_disabled(self) -> bool:
        return self.kind is CacheOverrideKind.DISABLED


@dataclass(frozen=True)
class CacheDecision:
    """Outcome of the cache precedence rules: disabled, or an absolute path."""

    path: Optional[str] = None

    @classmethod
    def disabled(cls) -> "CacheDecision":
        return cls(None)

    @classmethod
    def at(cls, path: str) -> "CacheDecision":
        return cls(path)

    @property
    def is_disabled(self) -> bool:
        return self.path is None


class CacheLocationPolicy:
    """
    Applies the cache precedence rules for one working directory:
    explicit override, then the configured value, then the default file name.
    """

    def __init__(self, working_directory: str, path_resolver: Optional[PathResolver] = None):
        self.working_directory = working_directory
        self.path_resolver = path_resolver or PathResolver()

    def decide(
        self,
        override: Optional[CacheOverride],
        configured_value: Optional[str],
        default_name: str = DEFAULT_CACHE_FILE,
    ) -> CacheDecision:
        """
        Decide the effective cache location.

        Args:
            override: Caller supplied override, ``None`` behaves like UNSET
            configured_value: ``cache_file`` found in the loaded configuration
            default_name: File name used when nothing else applies

        Returns:
            Disabled decision, or the chosen path made absolute
        """
        override = override or CacheOverride.unset()

        if override.is_disabled:
            logger.info("Cache disabled by override")
            return CacheDecision.disabled()

        if override.kind is CacheOverrideKind.PATH:
            candidate, origin = override.path, "override"
        elif configured_value:
            candidate, origin = configured_value, "configuration"
        else:
            candidate, origin = default_name, "default"

        path = self.path_resolver.resolve(candidate, self.working_directory)
        logger.info("Cache file decided", cache_file=path, origin=origin)
        return CacheDecision.at(path)

    def clear(self, path: str) -> None:
        """
        Delete a stale cache file.

        A missing file is not an error.

        Raises:
            CacheFileError: If the file exists but cannot be removed
        """
        path = self.path_resolver.resolve(path, self.working_directory)
        try:
            os.unlink(path)
            logger.info("Cache file cleared", cache_file=path)
        except FileNotFoundError:
            logger.debug("No cache file to clear", cache_file=path)
        except OSError as e:
            logger.error(f"Failed to clear cache file {path}: {e}")
            raise CacheFileError.not_removable(path, str(e)) from e
