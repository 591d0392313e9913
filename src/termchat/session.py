"""Chat session controller.

Holds the mutable state the UI renders (transcript, current chat, model,
token counter, messages for the user) and applies command effects to it.
It has no dependency on the UI toolkit, so the whole prompt/command flow
can be driven from tests or from the CLI.
"""

from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import assert_never

from loguru import logger

from .commands.base import CommandContext, CommandResult
from .commands.effects import (
    AppendMessage,
    ClearError,
    ClearTokenCounter,
    ClearTranscript,
    CreateNewChat,
    Effect,
    Exit,
    NoOp,
    ReplaceTranscript,
    SetChatId,
    SetChatTitle,
    SetError,
    SetMode,
    SetModel,
    ShowInfo,
    ToggleHelp,
    ViewMode,
)
from .commands.parser import is_command, parse_command
from .commands.registry import CommandRegistry
from .config import (
    DEFAULT_CHAT_TITLE,
    DEFAULT_VISION_MODEL,
    TITLE_MAX_LENGTH,
    TITLE_TRUNCATED_LENGTH,
)
from .llm.base import LLMProvider
from .llm.models import (
    ChatOptions,
    ChatResult,
    ContentCallback,
    ImageAttachment,
    ImageGenerationResult,
    Message,
    Role,
    VisionChatOptions,
)
from .llm.request import is_supported_image, parse_file_attachment
from .storage.base import ChatStore

DEFAULT_VISION_PROMPT = "What's in this image?"
UNSUPPORTED_IMAGE_MESSAGE = "Unsupported file type. Supported: PNG, JPEG, GIF, WebP, BMP"


class SessionState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    ERROR = "error"


def make_chat_title(first_message: str) -> str:
    """Title a chat after its first user message, truncated with an ellipsis."""
    text = first_message.strip()
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_TRUNCATED_LENGTH] + "..."
    return text or DEFAULT_CHAT_TITLE


class ChatSession:
    """State and behaviour behind the chat screen.

    Example:
        session = ChatSession(llm, store, create_command_registry(), export_dir=Path("exports"))
        await session.start()
        await session.submit("Hello!", on_content=print)
        await session.submit("/stats")
        print(session.info)
    """

    def __init__(
        self,
        llm: LLMProvider,
        store: ChatStore,
        registry: CommandRegistry,
        *,
        export_dir: Path,
        model: str | None = None,
        vision_model: str = DEFAULT_VISION_MODEL,
        image_dir: Path | None = None,
    ):
        self.llm = llm
        self.store = store
        self.registry = registry
        self.export_dir = export_dir
        self.image_dir = image_dir
        self.vision_model = vision_model
        self._requested_model = model

        self.model = model or ""
        self.chat_id: str | None = None
        self.chat_title = DEFAULT_CHAT_TITLE
        self.messages: list[Message] = []
        self.total_tokens = 0
        self.error: str | None = None
        self.info: str | None = None
        self.show_help = True
        self.view_mode = ViewMode.CHAT
        self.image_prompt: str | None = None
        self.state = SessionState.IDLE
        self.should_exit = False
        # Awaited after the user message and reply placeholder are added
        self.on_transcript_change: Callable[[], Awaitable[None]] | None = None

    @property
    def is_streaming(self) -> bool:
        return self.state == SessionState.STREAMING

    async def start(self) -> None:
        """Load settings, then resume the most recent chat if it is empty or create one."""
        settings = await self.store.get_settings()
        self.model = self._requested_model or settings.last_used_model
        self.show_help = settings.show_commands_help

        recent = await self.store.get_most_recent()
        if recent is not None and not recent.messages:
            self._set_chat(recent.id, recent.title)
        else:
            await self.new_chat()

        logger.info("Session started: chat={} model={}", self.chat_id, self.model)

    async def new_chat(self) -> bool:
        """Create a chat in the store and make it current."""
        try:
            chat = await self.store.create_chat()
        except Exception:
            logger.exception("Creating chat failed")
            self.error = "Failed to create new chat"
            return False

        self._set_chat(chat.id, chat.title)
        self.total_tokens = 0
        self.error = None
        return True

    async def open_chat(self, chat_id: str) -> bool:
        """Load a saved chat and its transcript."""
        chat = await self.store.get_chat(chat_id)
        if chat is None:
            self.error = f"Chat not found: {chat_id}"
            return False

        self._set_chat(chat.id, chat.title)
        self.messages = [
            Message(role=message.role, content=message.content)
            for message in chat.messages
            if message.role in (Role.USER.value, Role.ASSISTANT.value)
        ]
        return True

    def _set_chat(self, chat_id: str, title: str) -> None:
        self.chat_id = chat_id
        self.chat_title = title
        self.messages = []

    def context(self) -> CommandContext:
        """Snapshot of the session for command execution."""
        return CommandContext(
            current_model=self.model,
            current_chat_id=self.chat_id,
            current_chat_title=self.chat_title,
            messages=tuple(self.messages),
            total_tokens=self.total_tokens,
            llm=self.llm,
            store=self.store,
            export_dir=self.export_dir,
        )

    async def apply(self, effects: Iterable[Effect]) -> None:
        """Apply effects in order."""
        for effect in effects:
            await self._apply_one(effect)

    async def _apply_one(self, effect: Effect) -> None:
        match effect:
            case NoOp():
                pass
            case Exit():
                self.should_exit = True
            case ClearTranscript():
                self.messages = []
            case ClearTokenCounter():
                self.total_tokens = 0
            case ClearError():
                self.error = None
            case SetError(message=message):
                self.error = message
            case ReplaceTranscript(messages=messages):
                self.messages = list(messages)
            case AppendMessage(message=message):
                self.messages.append(message)
            case ToggleHelp():
                self.show_help = not self.show_help
            case SetMode(mode=mode, prompt=prompt):
                self.view_mode = mode
                if prompt is not None:
                    self.image_prompt = prompt
            case CreateNewChat():
                await self.new_chat()
            case SetChatId(chat_id=chat_id):
                self.chat_id = chat_id
            case SetChatTitle(title=title):
                self.chat_title = title
            case SetModel(model=model):
                self.model = model
                await self._remember_model(model)
            case ShowInfo(message=message):
                self.info = message
            case _:
                assert_never(effect)

    async def _remember_model(self, model: str) -> None:
        try:
            settings = await self.store.get_settings()
            await self.store.save_settings(settings.model_copy(update={"last_used_model": model}))
        except Exception:
            logger.exception("Saving model preference failed")

    async def run_command(self, text: str) -> CommandResult:
        """Execute a command line and apply its effects."""
        parsed = parse_command(text)
        if parsed is None:
            result = CommandResult.fail("Invalid command format")
        else:
            result = await self.registry.execute(parsed.name, parsed.args, self.context())
        await self.apply(result.actions)
        return result

    async def submit(
        self,
        text: str,
        on_content: ContentCallback | None = None,
    ) -> CommandResult | ChatResult | None:
        """Handle one line of user input.

        Commands go through the registry. Anything else is sent to the model;
        an `@file:path` reference to an image routes the prompt to the vision
        model.

        Returns:
            CommandResult for commands, ChatResult for a completed reply,
            None when the input was empty or the reply failed (see `error`)
        """
        if not text.strip():
            return None

        self.info = None
        if is_command(text):
            return await self.run_command(text)

        self.error = None
        if self.chat_id is None and not await self.new_chat():
            self.error = "Failed to create chat session"
            return None

        cleaned, file_path = parse_file_attachment(text)
        display_content = text
        if file_path is not None:
            path = Path(file_path).expanduser()
            if not path.is_file():
                self.error = f"File not found: {file_path}"
                return None
            if not is_supported_image(path):
                self.error = UNSUPPORTED_IMAGE_MESSAGE
                return None
            display_content = f"📎 {path.name}\n{cleaned}"

        history = list(self.messages)
        is_first_message = not history

        chat_id = self.chat_id
        self.messages.append(Message(role=Role.USER, content=display_content))
        self.messages.append(Message(role=Role.ASSISTANT, content=""))
        # A command may replace the transcript while the reply is in flight
        transcript = self.messages
        reply_index = len(transcript) - 1

        def owns_reply() -> bool:
            return self.messages is transcript

        self.state = SessionState.STREAMING
        if self.on_transcript_change is not None:
            await self.on_transcript_change()

        await self._save_message(Role.USER, display_content, chat_id=chat_id)
        if is_first_message:
            await self._update_title(cleaned or text, chat_id)

        fragments: list[str] = []

        def handle_content(fragment: str) -> None:
            fragments.append(fragment)
            if not owns_reply():
                return
            transcript[reply_index] = Message(role=Role.ASSISTANT, content="".join(fragments))
            if on_content is not None:
                on_content(fragment)

        try:
            if file_path is not None:
                result = await self.llm.vision_chat(
                    VisionChatOptions(
                        model=self.vision_model,
                        prompt=cleaned or DEFAULT_VISION_PROMPT,
                        images=[ImageAttachment(type="file", data=str(Path(file_path).expanduser()))],
                    ),
                    on_content=handle_content,
                )
            else:
                history.append(Message(role=Role.USER, content=text))
                result = await self.llm.chat_stream(
                    ChatOptions(model=self.model, messages=history),
                    on_content=handle_content,
                )
        except Exception as e:
            logger.exception("Chat request failed")
            self.state = SessionState.ERROR
            self.error = str(e) or "An error occurred"
            if owns_reply():
                del transcript[reply_index]
            return None

        self.state = SessionState.IDLE
        if owns_reply():
            transcript[reply_index] = Message(role=Role.ASSISTANT, content=result.content)
            self.total_tokens += result.usage.total_tokens

        await self._save_message(Role.ASSISTANT, result.content, chat_id=chat_id)
        return result

    async def generate_image(self, prompt: str) -> ImageGenerationResult | None:
        """Run an image prompt and return to chat mode.

        A successful generation is added to the transcript as an assistant
        message listing the saved files.
        """
        self.image_prompt = None
        self.view_mode = ViewMode.CHAT
        self.error = None

        try:
            result = await self.llm.generate_image(prompt, save_dir=self.image_dir)
        except Exception as e:
            logger.exception("Image generation failed")
            self.error = str(e) or "Image generation failed"
            return None

        if not result.success:
            self.error = result.error or "Image generation failed"
            return result

        lines = ["🎨 Image generated successfully!"]
        if result.text_content:
            lines.append(result.text_content)
        lines.extend(f"📁 Saved: {image.saved_path}" for image in result.images if image.saved_path)
        content = "\n".join(lines)

        self.messages.append(Message(role=Role.ASSISTANT, content=content))
        self.total_tokens += result.usage.total_tokens
        await self._save_message(Role.ASSISTANT, content)
        return result

    def cancel_image(self) -> None:
        self.view_mode = ViewMode.CHAT
        self.image_prompt = None

    async def _save_message(self, role: Role, content: str, chat_id: str | None = None) -> None:
        chat_id = chat_id or self.chat_id
        if chat_id is None:
            return
        try:
            await self.store.add_message(chat_id, role.value, content)
        except Exception:
            logger.exception("Saving message failed")

    async def _update_title(self, first_message: str, chat_id: str | None) -> None:
        if chat_id is None:
            return
        title = make_chat_title(first_message)
        try:
            await self.store.rename(chat_id, title)
        except Exception:
            logger.exception("Renaming chat failed")
            return
        if self.chat_id == chat_id:
            self.chat_title = title
