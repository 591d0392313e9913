"""Built-in slash commands."""

from typing import TYPE_CHECKING

from .ai import ImageCommand, ModelsCommand
from .chat import ChatsCommand, ClearCommand, ExportCommand, NewCommand, StarCommand, TitleCommand
from .system import HelpCommand, QuitCommand, StatsCommand

if TYPE_CHECKING:
    from ..registry import CommandRegistry

BUILTIN_COMMANDS = (
    # System
    QuitCommand,
    HelpCommand,
    # Chat
    ClearCommand,
    NewCommand,
    ChatsCommand,
    StarCommand,
    TitleCommand,
    ExportCommand,
    # AI
    ImageCommand,
    ModelsCommand,
    # Utility
    StatsCommand,
)


def register_builtin_commands(registry: "CommandRegistry") -> None:
    """Register every built-in command on the registry."""
    for command_class in BUILTIN_COMMANDS:
        registry.register(command_class())


__all__ = [
    "BUILTIN_COMMANDS",
    "ChatsCommand",
    "ClearCommand",
    "ExportCommand",
    "HelpCommand",
    "ImageCommand",
    "ModelsCommand",
    "NewCommand",
    "QuitCommand",
    "StarCommand",
    "StatsCommand",
    "TitleCommand",
    "register_builtin_commands",
]
