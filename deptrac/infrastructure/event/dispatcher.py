# deptrac/infrastructure/event/dispatcher.py
from typing import Any, Callable, Dict, List, Optional, Tuple

from deptrac.infrastructure.logging.logger import get_logger


def event_name(event_or_type: Any) -> str:
    """Dotted class path used as the default event name."""
    cls = event_or_type if isinstance(event_or_type, type) else type(event_or_type)
    return f"{cls.__module__}.{cls.__qualname__}"


class EventDispatcher:
    """
    Dispatches events to listeners registered by the container.
    Listeners with a higher priority run first; equal priorities keep registration order.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[int, int, Callable[[Any], None]]]] = {}
        self._sequence = 0
        self._logger = get_logger(__name__)

    def add_listener(self, event: str, listener: Any, method: Optional[str] = None, priority: int = 0) -> None:
        """Register a callable, or ``listener.method``, for an event name."""
        handler = getattr(listener, method) if method else listener
        if not callable(handler):
            raise TypeError(f"Listener for {event} is not callable")
        self._sequence += 1
        self._listeners.setdefault(event, []).append((-priority, self._sequence, handler))
        self._listeners[event].sort(key=lambda item: (item[0], item[1]))
        self._logger.debug(f"Registered listener for event: {event}")

    def add_subscriber(self, subscriber: Any) -> None:
        """
        Register every listener a subscriber declares.

        ``get_subscribed_events()`` returns event name -> method name, or
        event name -> ``(method name, priority)``.
        """
        for event, declaration in subscriber.get_subscribed_events().items():
            if isinstance(declaration, str):
                self.add_listener(event, subscriber, declaration)
            else:
                method, priority = declaration
                self.add_listener(event, subscriber, method, priority)

    def get_listeners(self, event: str) -> List[Callable[[Any], None]]:
        return [handler for _, _, handler in self._listeners.get(event, [])]

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def dispatch(self, event: Any, name: Optional[str] = None) -> Any:
        """Dispatch an event to all registered listeners and return it."""
        name = name or event_name(event)
        handlers = self.get_listeners(name)

        self._logger.debug(f"Dispatching event {name} to {len(handlers)} listeners")

        for handler in handlers:
            handler(event)
        return event
