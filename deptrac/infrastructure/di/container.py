"""
Dependency Injection Container implementation.

The container is assembled in two phases. While it is being built, loaders
and compiler passes register parameters, service definitions, aliases and
extension configuration. ``compile()`` then lets the extensions turn their
configuration into parameters, runs the compiler passes, resolves parameter
placeholders and freezes the container. Only a compiled container hands out
service instances.
"""
import importlib
import os
import re
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set

from deptrac.infrastructure.di.compiler_passes import CompilerPass
from deptrac.infrastructure.di.definition import Arguments, Reference, ServiceDefinition
from deptrac.infrastructure.di.exceptions import (
    CircularReferenceError,
    DependencyInjectionError,
    ExtensionNotFoundError,
    FrozenContainerError,
    InvalidArgumentError,
    ParameterNotFoundError,
    ServiceInstantiationError,
    ServiceNotFoundError,
)
from deptrac.infrastructure.di.extension import Extension
from deptrac.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(r"%%|%([^%\s]+)%")
_ENV_PLACEHOLDER = re.compile(r"^env\((\w+)\)$")


@contextmanager
def timed_operation(operation_name: str) -> Iterator[None]:
    """Context manager to time and log an operation."""
    start_time = time.time()
    try:
        yield
    finally:
        elapsed_time = time.time() - start_time
        logger.debug(f"{operation_name} completed in {elapsed_time:.4f}s")


class DIContainer:
    """
    Service registry assembled from parameters, definitions and extensions.

    Features:
    - Parameters with ``%name%`` and ``%env(NAME)%`` placeholders
    - Service definitions keyed by id, with aliases and tags
    - Named configuration extensions validated when configuration is loaded
    - Compiler passes run once at compile time
    - Read-only after ``compile()``
    """

    def __init__(self):
        """Initialize an empty, mutable container."""
        self._parameters: Dict[str, Any] = {}
        self._definitions: Dict[str, ServiceDefinition] = {}
        self._aliases: Dict[str, str] = {}
        self._extensions: Dict[str, Extension] = {}
        self._extension_configs: Dict[str, List[Dict[str, Any]]] = {}
        self._compiler_passes: List[CompilerPass] = []
        self._resources: List[str] = []
        self._instances: Dict[str, Any] = {}
        self._resolution_stack: List[str] = []
        self._parameters_resolved = False
        self._compiled = False

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    def _ensure_mutable(self, operation: str) -> None:
        if self._compiled:
            raise FrozenContainerError(operation)

    # Parameters

    def set_parameter(self, name: str, value: Any) -> None:
        """
        Set a parameter, replacing any previous value.

        Args:
            name: Parameter name
            value: Parameter value, may contain placeholders until compiled
        """
        self._ensure_mutable("set_parameter")
        self._parameters[name] = value
        logger.debug(f"Set parameter {name}")

    def get_parameter(self, name: str) -> Any:
        """
        Get a parameter value.

        Raises:
            ParameterNotFoundError: If the parameter is not defined
        """
        if name not in self._parameters:
            raise ParameterNotFoundError(name)
        return self._parameters[name]

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    # Extensions

    def register_extension(self, extension: Extension) -> None:
        """Register a configuration extension under its alias."""
        self._ensure_mutable("register_extension")
        self._extensions[extension.alias] = extension
        self._extension_configs.setdefault(extension.alias, [])
        logger.debug(f"Registered extension {extension.alias}")

    def has_extension(self, name: str) -> bool:
        return name in self._extensions

    def get_extensions(self) -> Dict[str, Extension]:
        return dict(self._extensions)

    def get_extension(self, name: str) -> Extension:
        if name not in self._extensions:
            raise ExtensionNotFoundError(name, self._extensions.keys())
        return self._extensions[name]

    def load_from_extension(self, name: str, config: Optional[Dict[str, Any]]) -> None:
        """
        Add a configuration fragment for an extension.

        The fragment is validated against the extension schema right away so
        that errors point at the file that introduced them.

        Args:
            name: Extension alias (top-level configuration namespace)
            config: Configuration fragment, ``None`` is treated as empty

        Raises:
            ExtensionNotFoundError: If no extension handles ``name``
            InvalidArgumentError: If the fragment is not a mapping or fails validation
        """
        self._ensure_mutable("load_from_extension")
        extension = self.get_extension(name)
        if config is not None and not isinstance(config, dict):
            raise InvalidArgumentError(
                f'The configuration for "{name}" must be a mapping, {type(config).__name__} given.'
            )
        fragment = dict(config or {})
        extension.validate(fragment)
        self._extension_configs[name].append(fragment)
        logger.debug(f"Loaded configuration fragment for extension {name}", keys=sorted(fragment))

    def get_extension_config(self, name: str) -> List[Dict[str, Any]]:
        """Configuration fragments loaded for an extension, oldest first."""
        return [dict(fragment) for fragment in self._extension_configs.get(name, [])]

    # Compiler passes and resources

    def add_compiler_pass(self, compiler_pass: CompilerPass) -> None:
        self._ensure_mutable("add_compiler_pass")
        self._compiler_passes.append(compiler_pass)
        logger.debug(f"Added compiler pass {type(compiler_pass).__name__}")

    def add_resource(self, path: str) -> None:
        """Track a file the container was built from."""
        if path not in self._resources:
            self._resources.append(path)

    def get_resources(self) -> List[str]:
        return list(self._resources)

    # Definitions

    def set_definition(self, service_id: str, definition: ServiceDefinition) -> ServiceDefinition:
        """Register or replace a service definition, dropping any alias with the same id."""
        self._ensure_mutable("set_definition")
        self._aliases.pop(service_id, None)
        self._definitions[service_id] = definition
        logger.debug(f"Registered definition {service_id}")
        return definition

    def register(self, service_id: str, class_name: Optional[str] = None) -> ServiceDefinition:
        """Register a service with default settings and return its definition for tuning."""
        return self.set_definition(service_id, ServiceDefinition(class_name=class_name))

    def set_alias(self, alias: str, service_id: str) -> None:
        self._ensure_mutable("set_alias")
        if alias == service_id:
            raise InvalidArgumentError(f'An alias can not reference itself, got a circular reference on "{alias}".')
        self._definitions.pop(alias, None)
        self._aliases[alias] = service_id
        logger.debug(f"Registered alias {alias} -> {service_id}")

    def has_alias(self, alias: str) -> bool:
        return alias in self._aliases

    def get_aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def remove_definition(self, service_id: str) -> bool:
        self._ensure_mutable("remove_definition")
        return self._definitions.pop(service_id, None) is not None

    def _resolve_id(self, service_id: str) -> str:
        seen: Set[str] = set()
        while service_id in self._aliases:
            if service_id in seen:
                raise CircularReferenceError(service_id, sorted(seen))
            seen.add(service_id)
            service_id = self._aliases[service_id]
        return service_id

    def has_definition(self, service_id: str) -> bool:
        """Check if a service id (or alias) is known."""
        return self._resolve_id(service_id) in self._definitions

    def has(self, service_id: str) -> bool:
        return self.has_definition(service_id) or service_id in self._instances

    def get_definition(self, service_id: str) -> ServiceDefinition:
        """
        Get the definition of a service, following aliases.

        Raises:
            ServiceNotFoundError: If no definition is registered under the id
        """
        resolved = self._resolve_id(service_id)
        if resolved not in self._definitions:
            raise ServiceNotFoundError(service_id)
        return self._definitions[resolved]

    def get_definitions(self) -> Dict[str, ServiceDefinition]:
        return dict(self._definitions)

    def find_tagged_service_ids(self, tag: str) -> Dict[str, List[Dict[str, Any]]]:
        """Map of service id to tag attributes for every definition carrying ``tag``."""
        return {
            service_id: [dict(attributes) for attributes in definition.tags[tag]]
            for service_id, definition in self._definitions.items()
            if definition.has_tag(tag)
        }

    def register_instance(self, service_id: str, instance: Any) -> None:
        """Register a pre-created instance, usable before and after compilation."""
        self._instances[service_id] = instance
        logger.debug(f"Registered instance for {service_id}")

    # Compilation

    def compile(self) -> None:
        """
        Freeze the container.

        Loads every registered extension, runs the compiler passes, resolves
        parameter placeholders and checks that every reference points at a
        known service.

        Raises:
            FrozenContainerError: If the container is already compiled
            DependencyInjectionError: If placeholders or references cannot be resolved
        """
        self._ensure_mutable("compile")

        with timed_operation("Compile container"):
            for name, extension in self._extensions.items():
                logger.debug(f"Loading extension {name}")
                extension.load(self.get_extension_config(name), self)

            for compiler_pass in self._compiler_passes:
                logger.debug(f"Processing compiler pass {type(compiler_pass).__name__}")
                compiler_pass.process(self)

            self._parameters = {
                name: self._resolve_placeholders(value, f'parameter "{name}"', [name])
                for name, value in self._parameters.items()
            }
            self._parameters_resolved = True

            for service_id, definition in self._definitions.items():
                source = f'service "{service_id}"'
                definition.arguments = self._resolve_placeholders(definition.arguments, source, [])
                definition.calls = [
                    (method, self._resolve_placeholders(arguments, source, []))
                    for method, arguments in definition.calls
                ]
                self._check_references(service_id, definition)

            for alias, target in self._aliases.items():
                if not self.has(target):
                    raise ServiceNotFoundError(target, alias)

        self._compiled = True
        logger.debug(
            "Container compiled",
            parameters=len(self._parameters),
            definitions=len(self._definitions),
            aliases=len(self._aliases),
        )

    def _resolve_placeholders(self, value: Any, source: str, resolving: List[str]) -> Any:
        if isinstance(value, str):
            return self._resolve_string(value, source, resolving)
        if isinstance(value, list):
            return [self._resolve_placeholders(item, source, resolving) for item in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_placeholders(item, source, resolving) for item in value)
        if isinstance(value, dict):
            return {
                self._resolve_placeholders(key, source, resolving): self._resolve_placeholders(item, source, resolving)
                for key, item in value.items()
            }
        return value

    def _resolve_string(self, value: str, source: str, resolving: List[str]) -> Any:
        whole = _PLACEHOLDER.fullmatch(value)
        if whole and whole.group(1):
            return self._lookup_placeholder(whole.group(1), source, resolving)

        def replace(match: "re.Match[str]") -> str:
            if match.group(0) == "%%":
                return "%"
            resolved = self._lookup_placeholder(match.group(1), source, resolving)
            if isinstance(resolved, (list, dict)):
                raise InvalidArgumentError(
                    f'A string value must be composed of strings and/or numbers, '
                    f'but found parameter "{match.group(1)}" of type {type(resolved).__name__} '
                    f'inside string value "{value}" ({source}).'
                )
            return str(resolved)

        return _PLACEHOLDER.sub(replace, value)

    def _lookup_placeholder(self, name: str, source: str, resolving: List[str]) -> Any:
        env_match = _ENV_PLACEHOLDER.match(name)
        if env_match:
            env_name = env_match.group(1)
            if env_name not in os.environ:
                raise ParameterNotFoundError(name, source)
            return os.environ[env_name]

        if name not in self._parameters:
            raise ParameterNotFoundError(name, source)
        if self._parameters_resolved:
            return self._parameters[name]
        if name in resolving:
            raise InvalidArgumentError(
                f'Circular reference detected for parameter "{name}" ("{" > ".join(resolving + [name])}").'
            )
        return self._resolve_placeholders(self._parameters[name], source, resolving + [name])

    def _check_references(self, service_id: str, definition: ServiceDefinition) -> None:
        for reference in _iter_references([definition.arguments] + [args for _, args in definition.calls]):
            if not self.has(reference.service_id):
                raise ServiceNotFoundError(reference.service_id, service_id)

    # Service instantiation

    def get(self, service_id: str) -> Any:
        """
        Get a service instance.

        Args:
            service_id: Service id or alias

        Returns:
            Service instance; shared services are created once

        Raises:
            DependencyInjectionError: If the container is not compiled
            ServiceNotFoundError: If the service is unknown or private
            CircularReferenceError: If the service depends on itself
            ServiceInstantiationError: If the class cannot be imported or constructed
        """
        if service_id in self._definitions and not self._definitions[service_id].public:
            raise ServiceNotFoundError(service_id)
        if service_id in self._instances:
            return self._instances[service_id]
        if not self._compiled:
            raise DependencyInjectionError(
                f'Unable to get service "{service_id}": services are only available from a compiled container.'
            )
        return self._get_service(service_id)

    def get_optional(self, service_id: str) -> Optional[Any]:
        """Get a service, or None if it is not registered."""
        try:
            return self.get(service_id)
        except ServiceNotFoundError:
            return None

    def _get_service(self, service_id: str) -> Any:
        service_id = self._resolve_id(service_id)
        if service_id in self._instances:
            return self._instances[service_id]
        if service_id not in self._definitions:
            source = self._resolution_stack[-1] if self._resolution_stack else None
            raise ServiceNotFoundError(service_id, source)
        if service_id in self._resolution_stack:
            raise CircularReferenceError(service_id, list(self._resolution_stack))

        definition = self._definitions[service_id]
        self._resolution_stack.append(service_id)
        try:
            with timed_operation(f"Create service {service_id}"):
                instance = self._create_instance(service_id, definition)
        finally:
            self._resolution_stack.pop()

        if definition.shared:
            self._instances[service_id] = instance
        return instance

    def _create_instance(self, service_id: str, definition: ServiceDefinition) -> Any:
        cls = _import_class(service_id, definition.get_class(service_id))
        arguments = self._resolve_arguments(definition.arguments)

        try:
            if isinstance(arguments, dict):
                instance = cls(**arguments)
            else:
                instance = cls(*arguments)
        except DependencyInjectionError:
            raise
        except Exception as e:
            logger.error(f"Failed to instantiate {service_id}: {e}")
            raise ServiceInstantiationError(service_id, str(e), e) from e

        for method, call_arguments in definition.calls:
            resolved_call_arguments = self._resolve_arguments(call_arguments)
            try:
                bound = getattr(instance, method)
                if isinstance(resolved_call_arguments, dict):
                    bound(**resolved_call_arguments)
                else:
                    bound(*resolved_call_arguments)
            except DependencyInjectionError:
                raise
            except Exception as e:
                logger.error(f"Method call {method}() failed on {service_id}: {e}")
                raise ServiceInstantiationError(service_id, f"call to {method}() failed: {e}", e) from e

        logger.debug(f"Created service {service_id}")
        return instance

    def _resolve_arguments(self, value: Arguments) -> Any:
        if isinstance(value, Reference):
            return self._get_service(value.service_id)
        if isinstance(value, list):
            return [self._resolve_arguments(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_arguments(item) for item in value)
        if isinstance(value, dict):
            return {key: self._resolve_arguments(item) for key, item in value.items()}
        return value


def _iter_references(value: Any) -> Iterator[Reference]:
    if isinstance(value, Reference):
        yield value
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_references(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_references(item)


def _import_class(service_id: str, class_path: str) -> Any:
    """Import ``package.module.Class`` or ``package.module:Class``."""
    if ":" in class_path:
        module_name, _, attribute = class_path.partition(":")
    else:
        module_name, _, attribute = class_path.rpartition(".")
    if not module_name or not attribute:
        raise ServiceInstantiationError(service_id, f'"{class_path}" is not a dotted class path')

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ServiceInstantiationError(service_id, f'cannot import module "{module_name}": {e}', e) from e

    try:
        target = module
        for part in attribute.split("."):
            target = getattr(target, part)
    except AttributeError as e:
        raise ServiceInstantiationError(
            service_id, f'module "{module_name}" has no attribute "{attribute}"', e
        ) from e

    if not callable(target):
        raise ServiceInstantiationError(service_id, f'"{class_path}" is not callable')
    return target
