"""In-memory chat store backend.

Simple dict-based storage for session-only chats.
Data is lost when the application exits.
"""

from .base import ChatStore
from .models import AppSettings, Chat, StoredMessage, utc_now


class InMemoryChatStore(ChatStore):
    """In-memory chat store (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self) -> None:
        self._chats: dict[str, Chat] = {}
        self._settings = AppSettings()

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def create_chat(self, title: str | None = None) -> Chat:
        chat = Chat(title=title) if title else Chat()
        self._chats[chat.id] = chat
        return chat.model_copy(deep=True)

    async def get_chat(self, chat_id: str) -> Chat | None:
        chat = self._chats.get(chat_id)
        return chat.model_copy(deep=True) if chat else None

    async def list_chats(self) -> list[Chat]:
        # Later insertions win ties so a just-created chat sorts first
        ordered = reversed(list(self._chats.values()))
        return [
            chat.model_copy(deep=True)
            for chat in sorted(ordered, key=lambda c: c.timestamp, reverse=True)
        ]

    async def rename(self, chat_id: str, title: str) -> Chat | None:
        chat = self._chats.get(chat_id)
        if chat is None:
            return None
        chat.title = title
        return chat.model_copy(deep=True)

    async def set_starred(self, chat_id: str, starred: bool) -> Chat | None:
        chat = self._chats.get(chat_id)
        if chat is None:
            return None
        chat.starred = starred
        return chat.model_copy(deep=True)

    async def delete_chat(self, chat_id: str) -> bool:
        return self._chats.pop(chat_id, None) is not None

    async def add_message(self, chat_id: str, role: str, content: str) -> StoredMessage | None:
        chat = self._chats.get(chat_id)
        if chat is None:
            return None
        message = StoredMessage(role=role, content=content)
        chat.messages.append(message)
        chat.timestamp = utc_now()
        return message

    async def get_settings(self) -> AppSettings:
        return self._settings.model_copy()

    async def save_settings(self, settings: AppSettings) -> None:
        self._settings = settings.model_copy()

    @property
    def backend_type(self) -> str:
        return "memory"
