"""Console command registry filled by the container."""

from typing import Any, Dict, List


class CommandNotFoundError(LookupError):
    """Raised when no command is registered under a name."""

    def __init__(self, name: str, known: List[str]):
        message = f'Command "{name}" is not defined.'
        if known:
            message += f' Available commands: "{", ".join(known)}".'
        super().__init__(message)
        self.name = name


class CommandLoader:
    """Maps command names to the command services tagged ``console.command``."""

    def __init__(self, commands: Dict[str, Any]):
        self._commands = dict(commands)

    def has(self, name: str) -> bool:
        return name in self._commands

    def get(self, name: str) -> Any:
        if name not in self._commands:
            raise CommandNotFoundError(name, self.names())
        return self._commands[name]

    def names(self) -> List[str]:
        return sorted(self._commands)
