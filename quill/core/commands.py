from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .keymap import CommandHandler


def command_name(name: str) -> str:
    """Commands are registered as identifiers; ``find-file`` means ``find_file``."""
    return name.strip().replace("-", "_")


@dataclass
class Command:
    name: str
    handler: CommandHandler
    description: str


class CommandRegistry:
    """Registry for editor commands, looked up by name."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def register(self, name: str, handler: CommandHandler, description: str = "") -> None:
        name = command_name(name)
        self._commands[name] = Command(name=name, handler=handler, description=description)

    def command(self, name: str, description: str = "") -> Callable[[CommandHandler], CommandHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: CommandHandler) -> CommandHandler:
            self.register(name, handler, description)
            return handler

        return decorator

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(command_name(name))

    def names(self) -> List[str]:
        return sorted(self._commands)

    def descriptions(self) -> List[str]:
        return [f"{cmd.name} - {cmd.description}" for cmd in self._commands.values()]
