"""Compiler passes run while the container is being compiled."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict

from deptrac.infrastructure.di.definition import Reference, ServiceDefinition
from deptrac.infrastructure.di.exceptions import InvalidArgumentError
from deptrac.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from deptrac.infrastructure.di.container import DIContainer

logger = get_logger(__name__)


class CompilerPass(ABC):
    """Hook that can rewrite the container before it is frozen."""

    @abstractmethod
    def process(self, container: "DIContainer") -> None:
        """Inspect and modify the container."""


class AddConsoleCommandPass(CompilerPass):
    """
    Collect services tagged ``console.command`` into the command loader.

    Every tag needs a ``command`` attribute holding the command name. The
    loader receives a mapping of command name to service reference, so
    commands are only created when they are looked up.
    """

    def __init__(
        self,
        loader_id: str = "console.command_loader",
        tag: str = "console.command",
        loader_class: str = "deptrac.interface.command_loader.CommandLoader",
    ):
        self.loader_id = loader_id
        self.tag = tag
        self.loader_class = loader_class

    def process(self, container: "DIContainer") -> None:
        commands: Dict[str, Reference] = {}

        for service_id, tags in container.find_tagged_service_ids(self.tag).items():
            for attributes in tags:
                name = attributes.get("command")
                if not name:
                    raise InvalidArgumentError(
                        f'The "command" attribute is required on the "{self.tag}" tag of service "{service_id}".'
                    )
                if name in commands:
                    raise InvalidArgumentError(
                        f'Command "{name}" is registered by both "{commands[name]}" and "{service_id}".'
                    )
                commands[name] = Reference(service_id)

        container.set_definition(
            self.loader_id,
            ServiceDefinition(class_name=self.loader_class, arguments={"commands": commands}),
        )
        logger.debug(f"Registered {len(commands)} console command(s)")


class RegisterListenersPass(CompilerPass):
    """
    Wire tagged listeners and subscribers into the event dispatcher.

    ``event_listener`` tags take ``event``, an optional ``method`` (default
    ``on_<event>``) and an optional ``priority``. ``event_subscriber`` tagged
    services declare their own events through ``get_subscribed_events()``.
    """

    def __init__(
        self,
        dispatcher_id: str = "event_dispatcher",
        listener_tag: str = "event_listener",
        subscriber_tag: str = "event_subscriber",
    ):
        self.dispatcher_id = dispatcher_id
        self.listener_tag = listener_tag
        self.subscriber_tag = subscriber_tag

    def process(self, container: "DIContainer") -> None:
        if not container.has_definition(self.dispatcher_id):
            return

        dispatcher = container.get_definition(self.dispatcher_id)

        for service_id, tags in container.find_tagged_service_ids(self.listener_tag).items():
            for attributes in tags:
                event = attributes.get("event")
                if not event:
                    raise InvalidArgumentError(
                        f'Service "{service_id}" must define the "event" attribute on "{self.listener_tag}" tags.'
                    )
                method = attributes.get("method") or "on_" + _snake_case(event)
                priority = int(attributes.get("priority", 0))
                dispatcher.add_method_call(
                    "add_listener",
                    {"event": event, "listener": Reference(service_id), "method": method, "priority": priority},
                )
                logger.debug(f"Registered listener {service_id}.{method} for {event}")

        for service_id in container.find_tagged_service_ids(self.subscriber_tag):
            dispatcher.add_method_call("add_subscriber", [Reference(service_id)])
            logger.debug(f"Registered subscriber {service_id}")


def _snake_case(name: str) -> str:
    name = name.rpartition(".")[2]
    chars = []
    for index, char in enumerate(name):
        if char.isupper() and index and not name[index - 1].isupper():
            chars.append("_")
        chars.append(char.lower())
    return "".join(chars)
