"""Event dispatching."""

from .dispatcher import EventDispatcher, event_name

__all__ = ["EventDispatcher", "event_name"]
