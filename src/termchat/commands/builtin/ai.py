"""Commands that talk to the AI service."""

from loguru import logger

from ...config import MODEL_LIST_DISPLAY_LIMIT
from ..base import Command, CommandCategory, CommandContext, CommandResult
from ..effects import SetMode, SetModel, ShowInfo, ViewMode
from ..parser import join_args


class ImageCommand(Command):
    name = "image"
    aliases = ("img", "generate")
    description = "Generate an image with AI"
    usage = "/image [prompt]"
    category = CommandCategory.AI

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        prompt = join_args(args) if args else None
        return CommandResult.single(SetMode(ViewMode.IMAGE, prompt=prompt))


class ModelsCommand(Command):
    name = "models"
    aliases = ("model", "m")
    description = "View and select AI models"
    usage = "/models [list|set <model>|current]"
    category = CommandCategory.AI

    async def execute(self, args: list[str], context: CommandContext) -> CommandResult:
        sub_command = args[0].lower() if args else None

        if sub_command in (None, "list"):
            return await self._list(context)
        if sub_command == "set":
            return await self._set(args[1] if len(args) > 1 else None, context)
        if sub_command == "current":
            return CommandResult.single(ShowInfo(f"Current model: {context.current_model}"))

        return CommandResult.fail(f"Unknown subcommand: {sub_command}. Usage: {self.usage}")

    async def _list(self, context: CommandContext) -> CommandResult:
        try:
            models = await context.llm.get_models()
        except Exception:
            logger.exception("Fetching model catalog failed")
            return CommandResult.fail("Failed to fetch models from API")

        if not models:
            return CommandResult.single(ShowInfo("No models available"))

        lines = ["📦 Available Models:"]
        lines.extend(f"  • {model.id}" for model in models[:MODEL_LIST_DISPLAY_LIMIT])
        if len(models) > MODEL_LIST_DISPLAY_LIMIT:
            lines.append(f"  ... and {len(models) - MODEL_LIST_DISPLAY_LIMIT} more")
        lines.extend(["", f"Current: {context.current_model}"])

        return CommandResult.single(ShowInfo("\n".join(lines)))

    async def _set(self, model_name: str | None, context: CommandContext) -> CommandResult:
        if not model_name:
            return CommandResult.fail("Usage: /models set <model-name>")

        try:
            models = await context.llm.get_models()
        except Exception:
            logger.exception("Fetching model catalog failed")
            return CommandResult.fail("Failed to validate model")

        wanted = model_name.lower()
        match = next((model for model in models if model.id.lower() == wanted), None)
        if match is None:
            return CommandResult.fail(
                f'Model "{model_name}" not found. Use /models list to see available models.'
            )

        return CommandResult.ok(
            SetModel(match.id),
            ShowInfo(f"✓ Model changed to: {match.id}"),
        )
