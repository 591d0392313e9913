"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history and command completion
- Status line formatting
- Chat message rendering and incremental streaming updates
"""

from collections.abc import Callable, Sequence
from typing import Any

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Input, Markdown, Static

from ..commands.parser import COMMAND_PREFIX
from ..llm.models import Message as ChatMessage
from .config import (
    HELP_PANEL_COMMANDS,
    HELP_PANEL_SPECIAL,
    INPUT_HISTORY_MAX_SIZE,
    INPUT_PLACEHOLDER,
    INPUT_PLACEHOLDER_BUSY,
    MESSAGE_TIMESTAMP_FORMAT,
    STREAMING_PLACEHOLDER,
)
from .models import DisplayMessage

Completer = Callable[[str], list[str]]

_ROLE_LABELS = {"user": "You", "assistant": "AI", "system": "System"}


class HistoryInput(Input):
    """Input widget with history and slash-command completion.

    Use Up/Down arrow keys to navigate through history.
    Tab completes a command name using the completer.
    Multi-line pastes are converted to single line (newlines become spaces).
    """

    def __init__(self, *args, completer: Completer | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._completer = completer
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""

    def _on_paste(self, event) -> None:
        """Handle paste events - convert newlines to spaces for single-line input."""
        from textual.events import Paste

        if isinstance(event, Paste) and event.text:
            clean_text = " ".join(event.text.split())
            self.insert_text_at_cursor(clean_text)
            event.prevent_default()
            event.stop()

    def _on_key(self, event) -> None:
        """Handle history navigation and completion keys."""
        if event.key == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "tab" and self._complete():
            event.prevent_default()
            event.stop()

    def _complete(self) -> bool:
        """Complete the command name being typed. Returns True if handled."""
        text = self.value.lstrip()
        if self._completer is None or not text.startswith(COMMAND_PREFIX) or " " in text:
            return False

        matches = self._completer(text[len(COMMAND_PREFIX):])
        if not matches:
            self.app.bell()
            return True

        if len(matches) == 1:
            self.value = f"{COMMAND_PREFIX}{matches[0]} "
        else:
            common = _common_prefix(matches)
            self.value = f"{COMMAND_PREFIX}{common}"
            self.app.notify(" ".join(f"{COMMAND_PREFIX}{m}" for m in matches), timeout=3)
        self.cursor_position = len(self.value)
        return True

    def add_to_history(self, command: str) -> None:
        """Add a command to history."""
        if command and (not self._history or self._history[-1] != command):
            self._history.append(command)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self._current_input = ""


def _common_prefix(words: Sequence[str]) -> str:
    first, last = min(words), max(words)
    size = 0
    while size < min(len(first), len(last)) and first[size] == last[size]:
        size += 1
    return first[:size]


class ChatInputBar(Horizontal):
    """Single-line input with a Send button. Enter submits."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, completer: Completer | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._completer = completer

    def compose(self):
        yield HistoryInput(
            id="chat-input",
            placeholder=INPUT_PLACEHOLDER,
            completer=self._completer,
        )
        yield Button("Send", id="send-btn").with_tooltip("Submit message (Enter)")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def _submit(self) -> None:
        input_widget = self.query_one("#chat-input", HistoryInput)
        if input_widget.disabled:
            return
        value = input_widget.value.strip()
        if value:
            input_widget.add_to_history(value)
            input_widget.value = ""
            self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Disable input while a reply is streaming."""
        input_widget = self.query_one("#chat-input", HistoryInput)
        input_widget.disabled = busy
        input_widget.placeholder = INPUT_PLACEHOLDER_BUSY if busy else INPUT_PLACEHOLDER
        self.query_one("#send-btn", Button).disabled = busy
        self.set_class(busy, "-disabled")
        if not busy:
            input_widget.focus()

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()


class StatusBar(Static):
    """One-line status: model, chat title, streaming indicator, token count."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = ""
        self._chat_title = ""
        self._message_count = 0
        self._tokens = 0
        self._streaming = False

    def update_status(
        self,
        model: str,
        chat_title: str,
        message_count: int,
        tokens: int,
        streaming: bool = False,
    ) -> None:
        self._model = model
        self._chat_title = chat_title
        self._message_count = message_count
        self._tokens = tokens
        self._streaming = streaming
        self.set_class(streaming, "streaming")
        self._update_display()

    def _update_display(self) -> None:
        text = Text()
        text.append("Model: ", style="dim")
        text.append(self._model, style="bold")
        text.append("   Chat: ", style="dim")
        text.append(self._chat_title, style="bold")
        text.append(f" ({self._message_count} messages)", style="dim")
        if self._streaming:
            text.append("   ⟳ Streaming", style="bold yellow")
        if self._tokens > 0:
            text.append("   Tokens: ", style="dim")
            text.append(f"{self._tokens:,}", style="green")
        self.update(text)

    def get_plain_text(self) -> str:
        return (
            f"Model: {self._model}  Chat: {self._chat_title}  "
            f"Messages: {self._message_count}  Tokens: {self._tokens}"
        )


class CommandsHelp(Static):
    """Compact list of commands, built from the registry's command list."""

    BORDER_TITLE = "Commands"

    def __init__(self, commands: list[dict[str, Any]], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._commands = {command["name"]: command for command in commands}

    def on_mount(self) -> None:
        text = Text()
        for name in HELP_PANEL_COMMANDS:
            command = self._commands.get(name)
            if command is None:
                continue
            text.append(f"{COMMAND_PREFIX}{name}", style="bold cyan")
            text.append(f" {command['description']}   ", style="dim")
        text.append("\nSpecial: ", style="dim")
        for key, description in HELP_PANEL_SPECIAL:
            text.append(key, style="bold yellow")
            text.append(f" {description}", style="dim")
        self.update(text)


class MessageView(Vertical):
    """A rendered chat message.

    Assistant messages are rendered as Markdown once complete; while
    streaming they are plain text so each fragment is a cheap update.
    """

    def __init__(self, message: DisplayMessage, *args, **kwargs) -> None:
        super().__init__(*args, classes=f"chat-message {message.role}-message", **kwargs)
        self.message = message

    def compose(self):
        yield Static(self._header_text(), classes="message-header")
        yield self._content_widget()

    def _header_text(self) -> Text:
        label = _ROLE_LABELS.get(self.message.role, self.message.role.title())
        timestamp = self.message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)
        text = Text(f"{label} [{timestamp}]")
        if self.message.is_streaming:
            text.append(" ●", style="dim")
        return text

    def _content_widget(self) -> Static | Markdown:
        if self.message.role == "assistant" and not self.message.is_streaming:
            return Markdown(self.message.content, classes="message-content")
        return Static(
            Text(self.message.content or STREAMING_PLACEHOLDER),
            classes="message-content",
        )

    def update_stream(self, content: str) -> None:
        """Show the content accumulated so far."""
        self.message.content = content
        content_widget = self.query_one(".message-content")
        if isinstance(content_widget, Static):
            content_widget.update(Text(content or STREAMING_PLACEHOLDER))

    async def finish_stream(self) -> None:
        """Re-render as a completed message."""
        self.message.is_streaming = False
        await self.remove_children()
        await self.mount(Static(self._header_text(), classes="message-header"), self._content_widget())


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history kept in sync with the session transcript."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "No messages"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: list[MessageView] = []

    async def sync(self, messages: Sequence[ChatMessage], streaming: bool = False) -> None:
        """Render the transcript, touching only what changed.

        Args:
            messages: Current transcript
            streaming: The last message is an assistant reply still arriving
        """
        common = 0
        for view, message in zip(self._views, messages):
            if not view.message.same_as(message.role, message.content):
                break
            common += 1

        last_is_live = bool(self._views) and self._views[-1].message.is_streaming
        if (
            len(self._views) == len(messages)
            and common >= len(messages) - 1
            and last_is_live
        ):
            self._views[-1].update_stream(messages[-1].content)
            if not streaming:
                await self._views[-1].finish_stream()
            self._after_change()
            return

        if common == len(self._views) == len(messages):
            return

        for view in self._views[common:]:
            await view.remove()
        del self._views[common:]

        new_views = []
        for index, message in enumerate(messages[common:], start=common):
            display = DisplayMessage(
                role=message.role,
                content=message.content,
                is_streaming=streaming and index == len(messages) - 1 and message.role == "assistant",
            )
            new_views.append(MessageView(display))
        if new_views:
            await self.mount_all(new_views)
        self._views.extend(new_views)
        self._after_change()

    def update_stream(self, content: str) -> None:
        """Update the live assistant message without a full sync."""
        if self._views and self._views[-1].message.is_streaming:
            self._views[-1].update_stream(content)
            self.scroll_end(animate=False)

    def _after_change(self) -> None:
        count = len(self._views)
        self.border_subtitle = f"{count} messages" if count else "No messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for view in reversed(self._views):
            if view.message.role == "assistant":
                return view.message.content
        return None
