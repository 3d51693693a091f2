"""YAML configuration loader."""

from typing import Any, Dict, List, Union

import yaml

from deptrac.infrastructure.di.definition import Reference, ServiceDefinition
from deptrac.infrastructure.di.exceptions import (
    DependencyInjectionError,
    ExtensionNotFoundError,
    LoaderLoadError,
)
from deptrac.infrastructure.di.loaders.base import FileLoader

RESERVED_KEYS = ("imports", "parameters", "services")

SERVICE_KEYS = ("class", "arguments", "calls", "tags", "public", "shared", "alias")


class YamlFileLoader(FileLoader):
    """
    Loads ``.yaml``/``.yml`` files.

    Top-level keys are ``imports``, ``parameters``, ``services``, or the
    namespace of a registered extension, e.g.::

        imports:
          - base.yaml
        parameters:
          report_dir: build
        services:
          my.parser:
            class: acme.parser.Parser
            arguments: ['@deptrac.infrastructure.ast.cache.AstFileReferenceCache']
        deptrac:
          paths: [src]
    """

    extensions = (".yaml", ".yml")

    def _load_file(self, path: str) -> None:
        content = self._parse(path)
        if content is None:
            return

        self._validate(content, path)

        for entry in content.get("imports") or []:
            if isinstance(entry, str):
                self.import_resource(entry, path)
            else:
                self.import_resource(entry["resource"], path, bool(entry.get("ignore_errors", False)))

        for name, value in (content.get("parameters") or {}).items():
            self.container.set_parameter(name, self._resolve_services(value))

        for namespace, config in content.items():
            if namespace in RESERVED_KEYS:
                continue
            try:
                self.container.load_from_extension(namespace, config)
            except DependencyInjectionError as e:
                raise LoaderLoadError(f"{e} (in {path})") from e

        for service_id, service in (content.get("services") or {}).items():
            self._parse_definition(service_id, service, path)

    def _parse(self, path: str) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except OSError as e:
            raise LoaderLoadError(f'Unable to read "{path}": {e}') from e
        except yaml.YAMLError as e:
            raise LoaderLoadError(f'The file "{path}" does not contain valid YAML: {e}') from e

    def _validate(self, content: Any, path: str) -> None:
        if not isinstance(content, dict):
            raise LoaderLoadError(f'The service file "{path}" is not valid. It should contain a mapping.')

        imports = content.get("imports")
        if imports is not None:
            if not isinstance(imports, list):
                raise LoaderLoadError(f'The "imports" key should contain a list in {path}.')
            for entry in imports:
                if isinstance(entry, dict) and isinstance(entry.get("resource"), str):
                    continue
                if not isinstance(entry, str):
                    raise LoaderLoadError(f'Every import in {path} must be a string or a mapping with a "resource" key.')

        for key in ("parameters", "services"):
            if content.get(key) is not None and not isinstance(content[key], dict):
                raise LoaderLoadError(f'The "{key}" key should contain a mapping in {path}.')

        for namespace in content:
            if namespace in RESERVED_KEYS:
                continue
            if not self.container.has_extension(namespace):
                error = ExtensionNotFoundError(namespace, self.container.get_extensions(), path)
                raise LoaderLoadError(str(error)) from error

    def _parse_definition(self, service_id: str, service: Any, path: str) -> None:
        if isinstance(service, str) and service.startswith("@"):
            self.container.set_alias(service_id, service[1:])
            return

        if service is None:
            self.container.set_definition(service_id, ServiceDefinition())
            return

        if not isinstance(service, dict):
            raise LoaderLoadError(
                f'A service definition must be a mapping or a string starting with "@" '
                f'but {type(service).__name__} found for service "{service_id}" in {path}.'
            )

        unknown = [key for key in service if key not in SERVICE_KEYS]
        if unknown:
            raise LoaderLoadError(
                f'The configuration key "{unknown[0]}" is unsupported for definition "{service_id}" in "{path}". '
                f'Allowed configuration keys are "{", ".join(SERVICE_KEYS)}".'
            )

        if "alias" in service:
            self.container.set_alias(service_id, service["alias"])
            return

        arguments = self._resolve_services(service.get("arguments") or [])
        if not isinstance(arguments, (list, dict)):
            raise LoaderLoadError(f'The "arguments" of service "{service_id}" must be a list or a mapping in {path}.')

        definition = ServiceDefinition(
            class_name=service.get("class"),
            arguments=arguments,
            public=bool(service.get("public", True)),
            shared=bool(service.get("shared", True)),
        )

        for call in service.get("calls") or []:
            method, call_arguments = self._parse_call(call, service_id, path)
            definition.add_method_call(method, self._resolve_services(call_arguments))

        for tag in service.get("tags") or []:
            if isinstance(tag, str):
                definition.add_tag(tag)
            elif isinstance(tag, dict) and "name" in tag:
                attributes = {key: value for key, value in tag.items() if key != "name"}
                definition.add_tag(tag["name"], **attributes)
            else:
                raise LoaderLoadError(f'A "tags" entry is missing a "name" key for service "{service_id}" in {path}.')

        self.container.set_definition(service_id, definition)

    def _parse_call(self, call: Any, service_id: str, path: str) -> tuple:
        if isinstance(call, list) and call and isinstance(call[0], str):
            return call[0], call[1] if len(call) > 1 else []
        if isinstance(call, dict) and len(call) == 1:
            method, call_arguments = next(iter(call.items()))
            return method, call_arguments or []
        raise LoaderLoadError(f'Invalid method call for service "{service_id}" in {path}.')

    def _resolve_services(self, value: Any) -> Union[Any, Reference, List[Any], Dict[str, Any]]:
        if isinstance(value, str):
            if value.startswith("@@"):
                return value[1:]
            if value.startswith("@") and len(value) > 1:
                return Reference(value[1:])
            return value
        if isinstance(value, list):
            return [self._resolve_services(item) for item in value]
        if isinstance(value, dict):
            return {key: self._resolve_services(item) for key, item in value.items()}
        return value
