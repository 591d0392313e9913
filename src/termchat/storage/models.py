"""Data models for chat persistence.

These models define the structure of stored chats and settings,
independent of the storage backend used.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from ..config import DEFAULT_CHAT_TITLE, DEFAULT_MODEL


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_chat_id() -> str:
    return f"chat_{uuid4().hex[:16]}"


def new_message_id() -> str:
    return f"msg_{uuid4().hex[:16]}"


class StoredMessage(BaseModel):
    """A persisted chat message."""

    id: str = Field(default_factory=new_message_id)
    role: str = Field(description="'user', 'assistant' or 'system'")
    content: str
    timestamp: datetime = Field(default_factory=utc_now)


class Chat(BaseModel):
    """A persisted conversation.

    `timestamp` is the time of the last activity, so sorting by it puts
    the most recently used chat first.
    """

    id: str = Field(default_factory=new_chat_id)
    title: str = DEFAULT_CHAT_TITLE
    timestamp: datetime = Field(default_factory=utc_now)
    starred: bool = False
    messages: list[StoredMessage] = Field(default_factory=list)

    def to_export_dict(self) -> dict[str, Any]:
        """Plain structure used for JSON export."""
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.timestamp.isoformat(),
            "starred": self.starred,
            "messages": [
                {
                    "role": message.role,
                    "content": message.content,
                    "timestamp": message.timestamp.isoformat(),
                }
                for message in self.messages
            ],
        }

    def to_markdown(self) -> str:
        """Render the chat as a Markdown document."""
        lines = [
            f"# {self.title}",
            "",
            f"*Created: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z')}*",
        ]
        if self.starred:
            lines.append("*⭐ Starred*")
        lines.extend(["", "---", ""])

        labels = {"user": "**You:**", "assistant": "**AI:**"}
        for message in self.messages:
            lines.append(labels.get(message.role, "**System:**"))
            lines.append("")
            lines.append(message.content)
            lines.append("")
        return "\n".join(lines)


class AppSettings(BaseModel):
    """User preferences persisted between runs."""

    last_used_model: str = DEFAULT_MODEL
    show_status_bar: bool = True
    show_commands_help: bool = True
