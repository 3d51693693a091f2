"""Console interface."""

from .command_loader import CommandLoader, CommandNotFoundError
from .commands import DebugConfigCommand

__all__ = ["CommandLoader", "CommandNotFoundError", "DebugConfigCommand"]
