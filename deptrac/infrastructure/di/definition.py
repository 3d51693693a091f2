"""Service definitions held by the container before instantiation."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

Arguments = Union[List[Any], Dict[str, Any]]


@dataclass(frozen=True)
class Reference:
    """Reference to another service, resolved when the owning service is created."""

    service_id: str

    def __str__(self) -> str:
        return self.service_id


@dataclass
class ServiceDefinition:
    """
    Describes how a service is built.

    When ``class_name`` is omitted the service id is used as the dotted class
    path, so ``deptrac.infrastructure.ast.parser.PythonAstParser`` can be
    registered without repeating the class.

    Attributes:
        class_name: Dotted path of the class (``package.module.Class``)
        arguments: Positional list or keyword mapping of constructor arguments
        calls: Method calls applied after construction as ``(method, arguments)``
        tags: Tag name mapped to the attribute sets it was added with
        public: Whether the service can be fetched from the compiled container
        shared: Whether one instance is reused for every lookup
    """

    class_name: Optional[str] = None
    arguments: Arguments = field(default_factory=list)
    calls: List[Tuple[str, Arguments]] = field(default_factory=list)
    tags: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    public: bool = True
    shared: bool = True

    def add_tag(self, name: str, **attributes: Any) -> "ServiceDefinition":
        self.tags.setdefault(name, []).append(dict(attributes))
        return self

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def add_method_call(self, method: str, arguments: Optional[Arguments] = None) -> "ServiceDefinition":
        self.calls.append((method, arguments if arguments is not None else []))
        return self

    def set_argument(self, key: Union[int, str], value: Any) -> "ServiceDefinition":
        """Replace one constructor argument by position or by keyword."""
        if isinstance(key, int):
            if not isinstance(self.arguments, list):
                raise TypeError("Positional arguments cannot be set on keyword definitions")
            while len(self.arguments) <= key:
                self.arguments.append(None)
            self.arguments[key] = value
        else:
            if isinstance(self.arguments, list) and self.arguments:
                raise TypeError("Keyword arguments cannot be set on positional definitions")
            if not isinstance(self.arguments, dict):
                self.arguments = {}
            self.arguments[key] = value
        return self

    def get_class(self, service_id: str) -> str:
        return self.class_name or service_id
