"""Command registry: name/alias lookup and guarded execution."""

from typing import Any

from loguru import logger

from ..errors import RegistrationConflictError
from .base import Command, CommandCategory, CommandContext, CommandResult
from .parser import parse_command

_HELP_CATEGORY_ORDER = (
    CommandCategory.CHAT,
    CommandCategory.AI,
    CommandCategory.NAVIGATION,
    CommandCategory.UTILITY,
    CommandCategory.SYSTEM,
)


class CommandRegistry:
    """Table of slash commands indexed by name and alias.

    Hidden design decisions:
    - Case-insensitive keys
    - Conflict detection at registration time
    - Failure capture: `execute` never raises

    The tables are only mutated by `register` (and `clear`); register every
    command before dispatching.
    """

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}
        self._aliases: dict[str, str] = {}

    def register(self, command: Command) -> None:
        """Register a command under its name and aliases.

        All checks run before the tables change, so a rejected command
        leaves the registry untouched.

        Raises:
            RegistrationConflictError: If the name or an alias is already taken
        """
        name = command.name.lower()
        if not name:
            raise RegistrationConflictError("Command name must not be empty")

        if name in self._commands:
            raise RegistrationConflictError(f'Command "{name}" is already registered')
        if name in self._aliases:
            raise RegistrationConflictError(f'Command name "{name}" conflicts with an existing alias')

        seen = {name}
        aliases: list[str] = []
        for alias in command.aliases:
            lower_alias = alias.lower()
            if lower_alias in self._commands:
                raise RegistrationConflictError(
                    f'Alias "{lower_alias}" conflicts with existing command name'
                )
            if lower_alias in self._aliases:
                raise RegistrationConflictError(f'Alias "{lower_alias}" is already registered')
            if lower_alias in seen:
                raise RegistrationConflictError(
                    f'Alias "{lower_alias}" is duplicated within command "{name}"'
                )
            seen.add(lower_alias)
            aliases.append(lower_alias)

        self._commands[name] = command
        for alias in aliases:
            self._aliases[alias] = name

        logger.debug("Registered command /{} (aliases: {})", name, ", ".join(aliases) or "none")

    def get(self, name_or_alias: str) -> Command | None:
        """Look up a command by name or alias (case-insensitive)."""
        key = name_or_alias.lower()
        command = self._commands.get(key)
        if command is not None:
            return command

        primary = self._aliases.get(key)
        if primary is not None:
            return self._commands.get(primary)
        return None

    def has(self, name_or_alias: str) -> bool:
        return self.get(name_or_alias) is not None

    def __contains__(self, name_or_alias: object) -> bool:
        return isinstance(name_or_alias, str) and self.has(name_or_alias)

    def __len__(self) -> int:
        return len(self._commands)

    async def execute(
        self,
        name_or_alias: str,
        args: list[str],
        context: CommandContext
    ) -> CommandResult:
        """Resolve and run a command.

        Unknown names and exceptions raised by the command body both come
        back as failed results.
        """
        command = self.get(name_or_alias)
        if command is None:
            return CommandResult.fail(
                f"Unknown command: /{name_or_alias}. Type /help for available commands."
            )

        try:
            return await command.execute(list(args), context)
        except Exception as e:
            logger.exception("Command /{} failed", command.name)
            return CommandResult.fail(f"Error executing /{command.name}: {e}")

    async def dispatch(self, text: str, context: CommandContext) -> CommandResult | None:
        """Parse a raw input line and execute it.

        Returns:
            CommandResult, or None if the line is not a command
        """
        parsed = parse_command(text)
        if parsed is None:
            return None
        return await self.execute(parsed.name, parsed.args, context)

    def get_completions(self, prefix: str) -> list[str]:
        """Names and aliases starting with prefix (case-insensitive), sorted."""
        lower = prefix.lower()
        matches = {key for key in self._commands if key.startswith(lower)}
        matches.update(key for key in self._aliases if key.startswith(lower))
        return sorted(matches)

    def get_all(self, include_hidden: bool = False) -> list[Command]:
        """All commands in registration order."""
        commands = list(self._commands.values())
        if include_hidden:
            return commands
        return [command for command in commands if not command.hidden]

    def get_by_category(self, category: CommandCategory) -> list[Command]:
        return [command for command in self.get_all() if command.category == category]

    def get_help_text(self) -> str:
        """Format visible commands grouped by category."""
        lines = ["Available Commands:", ""]

        for category in _HELP_CATEGORY_ORDER:
            commands = self.get_by_category(category)
            if not commands:
                continue

            lines.append(f"  {category.value.capitalize()}:")
            for command in commands:
                aliases = f" ({', '.join(command.aliases)})" if command.aliases else ""
                lines.append(f"    /{command.name}{aliases} - {command.description}")
            lines.append("")

        return "\n".join(lines)

    def get_command_list(self) -> list[dict[str, Any]]:
        """Visible commands as plain dicts, for UI display."""
        return [
            {
                "name": command.name,
                "aliases": list(command.aliases),
                "description": command.description,
                "category": command.category.value,
                "usage": command.usage,
            }
            for command in self.get_all()
        ]

    def clear(self) -> None:
        """Remove every command."""
        self._commands.clear()
        self._aliases.clear()


def create_command_registry(include_builtins: bool = True) -> CommandRegistry:
    """Create a command registry.

    Args:
        include_builtins: Register the built-in commands

    Returns:
        CommandRegistry instance

    Raises:
        RegistrationConflictError: If two commands claim the same name or alias
    """
    registry = CommandRegistry()
    if include_builtins:
        from .builtin import register_builtin_commands
        register_builtin_commands(registry)
    return registry
