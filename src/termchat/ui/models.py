"""Data models for the TUI.

Hides the internal representation of rendered chat messages.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DisplayMessage:
    """A chat message as shown in the history panel."""

    role: str  # "user", "assistant" or "system"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    is_streaming: bool = False

    def same_as(self, role: str, content: str) -> bool:
        return self.role == role and self.content == content
