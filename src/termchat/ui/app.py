"""Main Textual TUI application.

Orchestrates the UI components and routes user input through the
ChatSession, which owns all chat state.
"""

import asyncio

import pyperclip
from loguru import logger
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from ..commands.effects import ViewMode
from ..config import APP_NAME
from ..session import ChatSession
from .screens import ImagePromptScreen
from .styles import APP_CSS
from .themes import TERMCHAT_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, CommandsHelp, StatusBar


class TermChatApp(App):
    """Textual TUI for chatting with a hosted model."""

    CSS = APP_CSS
    TITLE = APP_NAME

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("f1", "toggle_help", "Help"),
    ]

    def __init__(self, session: ChatSession) -> None:
        super().__init__()
        self._session = session
        self._session.on_transcript_change = self._refresh

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield StatusBar(id="status-bar")
        yield ChatHistoryWidget(id="chat-history")
        yield CommandsHelp(self._session.registry.get_command_list(), id="commands-help")
        yield Static(id="notice")
        yield ChatInputBar(id="chat-input-bar", completer=self._session.registry.get_completions)
        yield Footer()

    async def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(TERMCHAT_DARK)
        self.theme = "termchat-dark"

        await self._session.start()
        await self._refresh()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def _refresh(self) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        await chat.sync(self._session.messages, streaming=self._session.is_streaming)
        self._refresh_chrome()

    def _refresh_chrome(self) -> None:
        """Update everything except the transcript."""
        session = self._session

        self.sub_title = session.chat_title
        self.query_one("#status-bar", StatusBar).update_status(
            model=session.model,
            chat_title=session.chat_title,
            message_count=len(session.messages),
            tokens=session.total_tokens,
            streaming=session.is_streaming,
        )

        help_panel = self.query_one("#commands-help", CommandsHelp)
        help_panel.display = session.show_help and not session.messages

        notice = self.query_one("#notice", Static)
        notice.remove_class("error", "info")
        if session.error:
            notice.update(Text(f"⚠ {session.error}"))
            notice.add_class("error")
        elif session.info:
            notice.update(Text(session.info))
            notice.add_class("info")
        else:
            notice.update("")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._session.is_streaming:
            return
        self._handle_input(event.value)

    @work(exclusive=True)
    async def _handle_input(self, text: str) -> None:
        """Run one prompt or command as a background async worker."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)

        def on_content(fragment: str) -> None:
            messages = self._session.messages
            if messages:
                chat.update_stream(messages[-1].content)

        input_bar.set_busy(True)
        try:
            await self._session.submit(text, on_content=on_content)
        except Exception as e:
            logger.exception("Unhandled error while handling input")
            self._session.error = str(e)
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)
        finally:
            input_bar.set_busy(False)
            await self._refresh()

        await self._after_effects()

    async def _after_effects(self) -> None:
        if self._session.should_exit:
            self.exit()
            return
        if self._session.view_mode == ViewMode.IMAGE:
            self.push_screen(ImagePromptScreen(self._session.image_prompt), self._on_image_prompt)

    def _on_image_prompt(self, prompt: str | None) -> None:
        if prompt is None:
            self._session.cancel_image()
            self.call_later(self._refresh)
            return
        self._generate_image(prompt)

    @work(exclusive=True)
    async def _generate_image(self, prompt: str) -> None:
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.set_busy(True)
        self.notify("Generating image...", timeout=3)
        try:
            result = await self._session.generate_image(prompt)
        finally:
            input_bar.set_busy(False)
            await self._refresh()

        if result is not None and result.success:
            self.notify("Image generated", timeout=3)

    async def action_clear_chat(self) -> None:
        """Clear the transcript, as /clear does."""
        if self._session.is_streaming:
            return
        await self._session.run_command("/clear")
        await self._refresh()
        self.notify("Chat cleared", timeout=2)

    async def action_new_chat(self) -> None:
        if self._session.is_streaming:
            return
        await self._session.run_command("/new")
        await self._refresh()

    async def action_toggle_help(self) -> None:
        if self._session.is_streaming:
            return
        await self._session.run_command("/help")
        await self._refresh()

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if not response:
            self.notify("No response to copy", severity="warning")
            return
        try:
            pyperclip.copy(response)
            self.notify("Response copied", timeout=2)
        except pyperclip.PyperclipException:
            self.copy_to_clipboard(response)
            self.notify("Response copied (terminal)", timeout=2)


async def run_textual_tui(session: ChatSession) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session wired to an AI provider and a chat store
    """
    app = TermChatApp(session)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
