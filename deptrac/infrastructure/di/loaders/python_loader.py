"""Python configuration loader and the configurator API handed to config files."""

import hashlib
import importlib.util
import sys
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from deptrac.infrastructure.di.definition import Arguments, Reference, ServiceDefinition
from deptrac.infrastructure.di.exceptions import LoaderLoadError
from deptrac.infrastructure.di.loaders.base import FileLoader

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer


def param(name: str) -> str:
    """Placeholder for a parameter, resolved when the container is compiled."""
    return f"%{name}%"


def env(name: str) -> str:
    """Placeholder for an environment variable, resolved when the container is compiled."""
    return f"%env({name})%"


def service(service_id: str) -> Reference:
    return Reference(service_id)


class ParametersConfigurator:
    def __init__(self, container: "DIContainer"):
        self._container = container

    def set(self, name: str, value: Any) -> "ParametersConfigurator":
        self._container.set_parameter(name, value)
        return self


class ServiceConfigurator:
    """Fluent access to a single service definition."""

    def __init__(self, definition: ServiceDefinition):
        self.definition = definition

    def args(self, *args: Any, **kwargs: Any) -> "ServiceConfigurator":
        if args and kwargs:
            raise LoaderLoadError("Service arguments must be either positional or keyword arguments, not both.")
        self.definition.arguments = dict(kwargs) if kwargs else list(args)
        return self

    def arg(self, key: Union[int, str], value: Any) -> "ServiceConfigurator":
        self.definition.set_argument(key, value)
        return self

    def call(self, method: str, arguments: Optional[Arguments] = None) -> "ServiceConfigurator":
        self.definition.add_method_call(method, arguments)
        return self

    def tag(self, name: str, **attributes: Any) -> "ServiceConfigurator":
        self.definition.add_tag(name, **attributes)
        return self

    def public(self) -> "ServiceConfigurator":
        self.definition.public = True
        return self

    def private(self) -> "ServiceConfigurator":
        self.definition.public = False
        return self

    def shared(self, shared: bool = True) -> "ServiceConfigurator":
        self.definition.shared = shared
        return self


class ServicesConfigurator:
    def __init__(self, container: "DIContainer"):
        self._container = container

    def set(self, service_id: str, class_name: Optional[str] = None) -> ServiceConfigurator:
        """Register (or replace) a service; the id doubles as the class path when ``class_name`` is omitted."""
        return ServiceConfigurator(self._container.register(service_id, class_name))

    def get(self, service_id: str) -> ServiceConfigurator:
        """Tune an already registered service."""
        return ServiceConfigurator(self._container.get_definition(service_id))

    def alias(self, alias: str, service_id: str) -> "ServicesConfigurator":
        self._container.set_alias(alias, service_id)
        return self

    def remove(self, service_id: str) -> "ServicesConfigurator":
        self._container.remove_definition(service_id)
        return self


class ContainerConfigurator:
    """
    Object passed to ``configure()`` in Python configuration files.

    Example::

        from deptrac.infrastructure.di.loaders.python_loader import param

        def configure(container):
            container.parameters().set("report_dir", "build")
            container.services().set("acme.Reporter").args(param("report_dir"))
            container.extension("deptrac", {"paths": ["src"]})
    """

    def __init__(self, container: "DIContainer", loader: "PythonFileLoader", path: str):
        self._container = container
        self._loader = loader
        self.path = path

    def parameters(self) -> ParametersConfigurator:
        return ParametersConfigurator(self._container)

    def services(self) -> ServicesConfigurator:
        return ServicesConfigurator(self._container)

    def extension(self, namespace: str, config: Optional[Dict[str, Any]] = None) -> None:
        self._container.load_from_extension(namespace, config)

    def import_(self, resource: str, ignore_errors: bool = False) -> None:
        self._loader.import_resource(resource, self.path, ignore_errors)


class PythonFileLoader(FileLoader):
    """
    Loads ``.py`` configuration files.

    The file is executed as a module and must define
    ``configure(container: ContainerConfigurator)``.
    """

    extensions = (".py",)

    def _load_file(self, path: str) -> None:
        module = self._execute(path)
        configure = getattr(module, "configure", None)
        if not callable(configure):
            raise LoaderLoadError(f'The configuration file "{path}" must define a "configure(container)" function.')
        configure(ContainerConfigurator(self.container, self, path))

    def _execute(self, path: str) -> Any:
        digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:12]
        module_name = f"deptrac_config_{digest}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise LoaderLoadError(f'Unable to load the configuration file "{path}".')

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        finally:
            sys.modules.pop(module_name, None)
        return module
