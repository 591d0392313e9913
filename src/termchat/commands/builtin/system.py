"""Application-level commands: quit, help and usage statistics."""

from loguru import logger

from ..base import Command, CommandCategory, CommandContext, CommandResult
from ..effects import Exit, ShowInfo, ToggleHelp


class QuitCommand(Command):
    name = "quit"
    aliases = ("exit", "q")
    description = "Exit the application"
    category = CommandCategory.SYSTEM

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        return CommandResult.single(Exit())


class HelpCommand(Command):
    name = "help"
    aliases = ("h", "?")
    description = "Toggle command help display"
    category = CommandCategory.UTILITY

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        return CommandResult.single(ToggleHelp())


class StatsCommand(Command):
    name = "stats"
    aliases = ("usage", "info")
    description = "View usage statistics"
    category = CommandCategory.UTILITY

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        try:
            stats = await context.llm.get_stats()
        except Exception:
            logger.exception("Fetching usage statistics failed")
            return CommandResult.fail("Failed to fetch usage statistics")

        lines = [
            "📊 Usage Statistics:",
            f"  • Total requests: {stats.total_requests}",
            f"  • Total tokens: {stats.total_tokens}",
            f"  • Session tokens: {context.total_tokens}",
            f"  • Current model: {context.current_model}",
            f"  • Active chat: {context.current_chat_title}",
            f"  • Messages in chat: {len(context.messages)}",
        ]
        return CommandResult.single(ShowInfo("\n".join(lines)))
