"""Terminal UI module for termchat.

Provides a Textual-based TUI over a ChatSession.

Module structure (each module hides a design decision):
- models.py: Data structures (rendered message representation)
- widgets.py: Custom widgets (input history and completion, status line, message rendering)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette and theme configuration
- screens.py: Modal dialogs (image prompt)
- app.py: Application orchestration (user interaction flow)
"""

from .app import TermChatApp, run_textual_tui
from .models import DisplayMessage
from .widgets import ChatHistoryWidget, ChatInputBar, CommandsHelp, StatusBar

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "CommandsHelp",
    "DisplayMessage",
    "StatusBar",
    "TermChatApp",
    "run_textual_tui",
]
