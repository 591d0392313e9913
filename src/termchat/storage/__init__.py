"""Chat persistence module for termchat.

Provides local storage of conversations and user settings.
"""

from .base import ChatStore
from .factory import create_chat_store
from .models import AppSettings, Chat, StoredMessage

__all__ = [
    "AppSettings",
    "Chat",
    "ChatStore",
    "StoredMessage",
    "create_chat_store",
]
