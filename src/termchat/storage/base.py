"""Abstract base class for chat store backends.

This module defines the interface for chat persistence.
The abstraction hides:
- Storage format (SQLite, in-memory)
- Persistence mechanism (file, database, process memory)
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import AppSettings, Chat, StoredMessage


class ChatStore(ABC):
    """Abstract chat store backend.

    Provides a unified CRUD-like interface over saved chats and settings.
    Methods addressing a chat by id return None (or False) when it does not
    exist rather than raising.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def create_chat(self, title: str | None = None) -> Chat:
        """Create and persist a new, empty chat."""

    @abstractmethod
    async def get_chat(self, chat_id: str) -> Chat | None:
        """Get a chat, with its messages, by id."""

    @abstractmethod
    async def list_chats(self) -> list[Chat]:
        """List all chats, most recently active first."""

    @abstractmethod
    async def rename(self, chat_id: str, title: str) -> Chat | None:
        """Change a chat's title."""

    @abstractmethod
    async def set_starred(self, chat_id: str, starred: bool) -> Chat | None:
        """Set a chat's star flag."""

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> bool:
        """Delete a chat and its messages."""

    @abstractmethod
    async def add_message(self, chat_id: str, role: str, content: str) -> StoredMessage | None:
        """Append a message to a chat and bump its activity timestamp."""

    @abstractmethod
    async def get_settings(self) -> AppSettings:
        """Load persisted settings, defaults when none are stored."""

    @abstractmethod
    async def save_settings(self, settings: AppSettings) -> None:
        """Persist settings."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    # Convenience methods built on the primitives above

    async def toggle_star(self, chat_id: str) -> bool | None:
        """Flip the star flag.

        Returns:
            The new star state, or None if the chat does not exist
        """
        chat = await self.get_chat(chat_id)
        if chat is None:
            return None
        updated = await self.set_starred(chat_id, not chat.starred)
        return updated.starred if updated else None

    async def list_starred(self) -> list[Chat]:
        return [chat for chat in await self.list_chats() if chat.starred]

    async def search(self, query: str) -> list[Chat]:
        """Find chats whose title or any message contains the query (case-insensitive)."""
        needle = query.lower()
        return [
            chat for chat in await self.list_chats()
            if needle in chat.title.lower()
            or any(needle in message.content.lower() for message in chat.messages)
        ]

    async def count(self) -> int:
        return len(await self.list_chats())

    async def get_most_recent(self) -> Chat | None:
        chats = await self.list_chats()
        return chats[0] if chats else None

    async def get_messages(self, chat_id: str) -> list[StoredMessage] | None:
        chat = await self.get_chat(chat_id)
        return chat.messages if chat else None

    async def export_chat(self, chat_id: str) -> dict[str, Any] | None:
        chat = await self.get_chat(chat_id)
        return chat.to_export_dict() if chat else None

    async def export_as_markdown(self, chat_id: str) -> str | None:
        chat = await self.get_chat(chat_id)
        return chat.to_markdown() if chat else None

    async def __aenter__(self) -> "ChatStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
