"""Abstract base class for slash commands.

This module defines the interface every command implements.
The abstraction hides:
- How a command gathers what it needs (AI service, chat store)
- How its outcome is presented (commands return effects, never touch the UI)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar

from ..llm.base import LLMProvider
from ..llm.models import Message
from ..storage.base import ChatStore
from .effects import Effect, SetError


class CommandCategory(str, Enum):
    """Grouping used by the help display."""

    CHAT = "chat"
    AI = "ai"
    NAVIGATION = "navigation"
    UTILITY = "utility"
    SYSTEM = "system"


@dataclass(frozen=True)
class CommandContext:
    """Read-only view of the session handed to a command.

    Commands request changes through the effects they return, never by
    mutating the context.
    """

    current_model: str
    current_chat_id: str | None
    current_chat_title: str
    messages: tuple[Message, ...]
    total_tokens: int
    llm: LLMProvider
    store: ChatStore
    export_dir: Path


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command execution.

    Attributes:
        success: Whether the command completed
        actions: Effects to apply, in order
        error: Human-readable failure message, if any
    """

    success: bool
    actions: tuple[Effect, ...] = field(default_factory=tuple)
    error: str | None = None

    @classmethod
    def ok(cls, *effects: Effect) -> "CommandResult":
        return cls(success=True, actions=tuple(effects))

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        """Failure result; carries a SetError so the shell shows the message."""
        return cls(success=False, actions=(SetError(message),), error=message)

    @classmethod
    def single(cls, effect: Effect) -> "CommandResult":
        return cls(success=True, actions=(effect,))


class Command(ABC):
    """A slash command definition.

    Subclasses set the class attributes and implement `execute`. The
    registry catches any exception raised from `execute`, so command bodies
    can be written as straight-line code.

    Example:
        class PingCommand(Command):
            name = "ping"
            description = "Reply with pong"
            category = CommandCategory.UTILITY

            async def execute(self, args, context):
                return CommandResult.single(ShowInfo("pong"))
    """

    name: ClassVar[str]
    aliases: ClassVar[tuple[str, ...]] = ()
    description: ClassVar[str] = ""
    usage: ClassVar[str | None] = None
    category: ClassVar[CommandCategory] = CommandCategory.UTILITY
    hidden: ClassVar[bool] = False

    @abstractmethod
    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        """Run the command.

        Args:
            args: Arguments after the command name
            context: Read-only session view

        Returns:
            CommandResult describing the effects to apply
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, aliases={self.aliases!r})"
