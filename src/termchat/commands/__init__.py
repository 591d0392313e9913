"""Slash-command system for termchat.

Usage:
    registry = create_command_registry()
    result = await registry.dispatch("/title My chat", context)
    if result is not None:
        await session.apply(result.actions)
"""

from .base import Command, CommandCategory, CommandContext, CommandResult
from .effects import Effect, ViewMode
from .parser import ParsedCommand, is_command, join_args, parse_command, tokenize
from .registry import CommandRegistry, create_command_registry

__all__ = [
    "Command",
    "CommandCategory",
    "CommandContext",
    "CommandRegistry",
    "CommandResult",
    "Effect",
    "ParsedCommand",
    "ViewMode",
    "create_command_registry",
    "is_command",
    "join_args",
    "parse_command",
    "tokenize",
]
