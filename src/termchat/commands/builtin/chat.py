"""Commands that act on the current conversation."""

import json
import re

from loguru import logger

from ...config import CHAT_LIST_DISPLAY_LIMIT
from ..base import Command, CommandCategory, CommandContext, CommandResult
from ..effects import ClearError, ClearTokenCounter, ClearTranscript, CreateNewChat, SetChatTitle, ShowInfo
from ..parser import join_args

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """File-name friendly version of a chat title."""
    slug = _SLUG_STRIP_RE.sub("-", title.lower()).strip("-")
    return slug[:40].rstrip("-") or "chat"


class ClearCommand(Command):
    name = "clear"
    aliases = ("cls",)
    description = "Clear chat messages"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        return CommandResult.ok(ClearTranscript(), ClearTokenCounter(), ClearError())


class NewCommand(Command):
    name = "new"
    description = "Start a new chat"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        return CommandResult.single(CreateNewChat())


class ChatsCommand(Command):
    name = "chats"
    aliases = ("conversations", "history")
    description = "List and manage saved chats"
    usage = "/chats [new|list]"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        sub_command = args[0].lower() if args else None

        if sub_command == "new":
            return CommandResult.single(CreateNewChat())

        if sub_command not in (None, "list"):
            return CommandResult.fail(f"Unknown subcommand: {sub_command}. Usage: {self.usage}")

        try:
            chats = await context.store.list_chats()
        except Exception:
            logger.exception("Listing chats failed")
            return CommandResult.fail("Failed to retrieve chats")

        count = len(chats)
        lines = [f"You have {count} saved chat{'' if count == 1 else 's'}."]
        for chat in chats[:CHAT_LIST_DISPLAY_LIMIT]:
            star = "⭐ " if chat.starred else ""
            current = " (current)" if chat.id == context.current_chat_id else ""
            lines.append(f"  • {star}{chat.title}{current}")
        if count > CHAT_LIST_DISPLAY_LIMIT:
            lines.append(f"  ... and {count - CHAT_LIST_DISPLAY_LIMIT} more")

        return CommandResult.single(ShowInfo("\n".join(lines)))


class StarCommand(Command):
    name = "star"
    aliases = ("favorite", "fav")
    description = "Star/unstar the current chat"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        if not context.current_chat_id:
            return CommandResult.fail("No active chat to star")

        try:
            starred = await context.store.toggle_star(context.current_chat_id)
        except Exception:
            logger.exception("Toggling star failed")
            return CommandResult.fail("Failed to toggle star status")

        if starred is None:
            return CommandResult.fail("No active chat to star")
        return CommandResult.single(ShowInfo("⭐ Chat starred!" if starred else "Chat unstarred"))


class TitleCommand(Command):
    name = "title"
    aliases = ("rename",)
    description = "Rename the current chat"
    usage = "/title <new title>"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        if not args:
            return CommandResult.fail(f"Usage: {self.usage}")
        if not context.current_chat_id:
            return CommandResult.fail("No active chat to rename")

        title = join_args(args)
        try:
            await context.store.rename(context.current_chat_id, title)
        except Exception:
            logger.exception("Renaming chat failed")
            return CommandResult.fail("Failed to rename chat")

        return CommandResult.single(SetChatTitle(title))


class ExportCommand(Command):
    name = "export"
    aliases = ("save",)
    description = "Export the current chat"
    usage = "/export [markdown|json]"
    category = CommandCategory.CHAT

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        if not context.current_chat_id:
            return CommandResult.fail("No active chat to export")

        export_format = args[0].lower() if args else "markdown"
        if export_format not in ("markdown", "md", "json"):
            return CommandResult.fail(
                f"Unknown format: {export_format}. Supported formats: markdown, json"
            )

        chat = await context.store.get_chat(context.current_chat_id)
        if chat is None:
            return CommandResult.fail("No active chat to export")

        if export_format == "json":
            extension = "json"
            body = json.dumps(chat.to_export_dict(), indent=2, ensure_ascii=False)
        else:
            extension = "md"
            body = chat.to_markdown()

        path = context.export_dir / f"{slugify(chat.title)}-{chat.id}.{extension}"
        try:
            context.export_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except OSError as e:
            logger.warning("Writing export {} failed: {}", path, e)
            return CommandResult.fail(f"Failed to export chat: {e}")
        logger.info("Exported chat {} to {}", chat.id, path)

        return CommandResult.single(ShowInfo(f"📋 Chat exported to {path}"))
