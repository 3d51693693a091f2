"""Exceptions raised by the service container and its file loaders."""

from typing import Iterable, List, Optional

from deptrac.infrastructure.exceptions import InfrastructureError


class DependencyInjectionError(InfrastructureError):
    """Base class for container errors."""

    pass


class ParameterNotFoundError(DependencyInjectionError):
    """Raised when a parameter (or environment variable placeholder) is missing."""

    def __init__(self, name: str, source: Optional[str] = None):
        message = f'You have requested a non-existent parameter "{name}".'
        if source:
            message = f'The {source} has a dependency on a non-existent parameter "{name}".'
        super().__init__(message, {"parameter": name})
        self.name = name


class ServiceNotFoundError(DependencyInjectionError):
    """Raised when a service id is neither a definition nor an alias."""

    def __init__(self, service_id: str, source_id: Optional[str] = None):
        if source_id:
            message = f'The service "{source_id}" has a dependency on a non-existent service "{service_id}".'
        else:
            message = f'You have requested a non-existent service "{service_id}".'
        super().__init__(message, {"service_id": service_id, "source_id": source_id})
        self.service_id = service_id
        self.source_id = source_id


class ExtensionNotFoundError(DependencyInjectionError):
    """Raised when configuration targets a namespace no extension handles."""

    def __init__(self, namespace: str, known: Iterable[str], resource: Optional[str] = None):
        known_list = sorted(known)
        where = f" (in {resource})" if resource else ""
        found = f'"{", ".join(known_list)}"' if known_list else "none"
        super().__init__(
            f'There is no extension able to load the configuration for "{namespace}"{where}. '
            f'Looked for namespace "{namespace}", found {found}.',
            {"namespace": namespace, "known": known_list},
        )
        self.namespace = namespace


class FrozenContainerError(DependencyInjectionError):
    """Raised when a compiled container is modified."""

    def __init__(self, operation: str):
        super().__init__(f"Impossible to call {operation}() on a compiled container.")
        self.operation = operation


class CircularReferenceError(DependencyInjectionError):
    """Raised when service instantiation loops back on itself."""

    def __init__(self, service_id: str, path: List[str]):
        chain = " -> ".join(path + [service_id])
        super().__init__(
            f'Circular reference detected for service "{service_id}", path: "{chain}".',
            {"path": path + [service_id]},
        )
        self.service_id = service_id
        self.path = path


class ServiceInstantiationError(DependencyInjectionError):
    """Raised when a service class cannot be imported or constructed."""

    def __init__(self, service_id: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(f'Unable to create service "{service_id}": {reason}', cause)
        self.service_id = service_id
        self.cause = cause


class InvalidArgumentError(DependencyInjectionError):
    """Raised when a definition, tag or placeholder is malformed."""

    pass


class LoaderError(InfrastructureError):
    """Base class for file loader errors."""

    pass


class LoaderLoadError(LoaderError):
    """Raised when a resource cannot be parsed or registered."""

    pass


class FileLocatorFileNotFoundError(LoaderError):
    """Raised when a file cannot be found in any of the locator paths."""

    def __init__(self, name: str, paths: List[str]):
        if paths:
            message = f'The file "{name}" does not exist (in: "{", ".join(paths)}").'
        else:
            message = f'The file "{name}" does not exist.'
        super().__init__(message, {"name": name, "paths": paths})
        self.name = name
        self.paths = paths
