"""Infrastructure error taxonomy for container assembly."""

from enum import Enum
from typing import Any, Optional


class InfrastructureError(Exception):
    """Base exception for infrastructure-related errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(InfrastructureError):
    """Raised when there's an issue with configuration."""

    pass


class ConfigurationSource(str, Enum):
    """Load stage that produced a configuration error."""

    SERVICES = "services"
    CONFIG = "config"
    CACHE = "cache"


class CannotLoadConfigurationError(ConfigurationError):
    """
    Raised when service definitions, the user configuration or the cache
    definitions cannot be loaded into the container.

    Attributes:
        source: Stage that failed
        file_name: Name of the file being loaded
        underlying_message: Message of the underlying error
    """

    _TEMPLATES = {
        ConfigurationSource.SERVICES: 'Unable to load service definitions from "{file}": {reason}',
        ConfigurationSource.CONFIG: 'Unable to load configuration file "{file}": {reason}',
        ConfigurationSource.CACHE: 'Unable to load cache definitions from "{file}": {reason}',
    }

    def __init__(self, source: ConfigurationSource, file_name: str, underlying_message: str):
        message = self._TEMPLATES[source].format(file=file_name, reason=underlying_message)
        super().__init__(
            message,
            {"source": source.value, "file_name": file_name, "reason": underlying_message},
        )
        self.source = source
        self.file_name = file_name
        self.underlying_message = underlying_message

    @classmethod
    def from_services(cls, file_name: str, underlying_message: str) -> "CannotLoadConfigurationError":
        return cls(ConfigurationSource.SERVICES, file_name, underlying_message)

    @classmethod
    def from_config(cls, file_name: str, underlying_message: str) -> "CannotLoadConfigurationError":
        return cls(ConfigurationSource.CONFIG, file_name, underlying_message)

    @classmethod
    def from_cache(cls, file_name: str, underlying_message: str) -> "CannotLoadConfigurationError":
        return cls(ConfigurationSource.CACHE, file_name, underlying_message)


class CacheFileErrorKind(str, Enum):
    """Reason a cache file could not be used."""

    NOT_WRITABLE = "not_writable"
    NOT_REMOVABLE = "not_removable"


class CacheFileError(InfrastructureError):
    """Raised when the cache file cannot be created, written or removed."""

    def __init__(self, kind: CacheFileErrorKind, path: str, reason: Optional[str] = None):
        if kind is CacheFileErrorKind.NOT_WRITABLE:
            message = f'Cache file "{path}" is not writable.'
        else:
            message = f'Cache file "{path}" could not be removed.'
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, {"kind": kind.value, "path": path})
        self.kind = kind
        self.path = path

    @classmethod
    def not_writable(cls, path: str, reason: Optional[str] = None) -> "CacheFileError":
        return cls(CacheFileErrorKind.NOT_WRITABLE, str(path), reason)

    @classmethod
    def not_removable(cls, path: str, reason: Optional[str] = None) -> "CacheFileError":
        return cls(CacheFileErrorKind.NOT_REMOVABLE, str(path), reason)
