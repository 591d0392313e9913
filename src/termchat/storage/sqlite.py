"""SQLite chat store backend.

Provides persistent chat storage using a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from .base import ChatStore
from .models import AppSettings, Chat, StoredMessage, utc_now

_SETTINGS_KEY = "app"


class SQLiteChatStore(ChatStore):
    """SQLite-backed chat store.

    Stores chats, messages and settings in a single database file.
    """

    def __init__(self, path: str | Path = "./chats.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteChatStore is not connected; call connect() first")
        return self._connection

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS chats (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                starred INTEGER NOT NULL DEFAULT 0
            )
        """)

        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                chat_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (chat_id) REFERENCES chats(id) ON DELETE CASCADE
            )
        """)

        await self._db.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_chat
            ON messages(chat_id, seq)
        """)

        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        await self._db.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _load_messages(self, chat_id: str) -> list[StoredMessage]:
        async with self._db.execute(
            """
            SELECT id, role, content, timestamp
            FROM messages
            WHERE chat_id = ?
            ORDER BY seq ASC
            """,
            (chat_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            StoredMessage(
                id=message_id,
                role=role,
                content=content,
                timestamp=datetime.fromisoformat(ts),
            )
            for message_id, role, content, ts in rows
        ]

    async def _row_to_chat(self, row: tuple) -> Chat:
        chat_id, title, ts, starred = row
        return Chat(
            id=chat_id,
            title=title,
            timestamp=datetime.fromisoformat(ts),
            starred=bool(starred),
            messages=await self._load_messages(chat_id),
        )

    async def create_chat(self, title: str | None = None) -> Chat:
        chat = Chat(title=title) if title else Chat()
        await self._db.execute(
            "INSERT INTO chats (id, title, timestamp, starred) VALUES (?, ?, ?, ?)",
            (chat.id, chat.title, chat.timestamp.isoformat(), int(chat.starred))
        )
        await self._db.commit()
        return chat

    async def get_chat(self, chat_id: str) -> Chat | None:
        async with self._db.execute(
            "SELECT id, title, timestamp, starred FROM chats WHERE id = ?",
            (chat_id,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return await self._row_to_chat(row)

    async def list_chats(self) -> list[Chat]:
        async with self._db.execute(
            "SELECT id, title, timestamp, starred FROM chats ORDER BY timestamp DESC, rowid DESC"
        ) as cursor:
            rows = await cursor.fetchall()

        return [await self._row_to_chat(row) for row in rows]

    async def count(self) -> int:
        async with self._db.execute("SELECT COUNT(*) FROM chats") as cursor:
            row = await cursor.fetchone()
        return row[0]

    async def get_most_recent(self) -> Chat | None:
        async with self._db.execute(
            "SELECT id, title, timestamp, starred FROM chats ORDER BY timestamp DESC, rowid DESC LIMIT 1"
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return await self._row_to_chat(row)

    async def rename(self, chat_id: str, title: str) -> Chat | None:
        await self._db.execute("UPDATE chats SET title = ? WHERE id = ?", (title, chat_id))
        await self._db.commit()
        return await self.get_chat(chat_id)

    async def set_starred(self, chat_id: str, starred: bool) -> Chat | None:
        await self._db.execute("UPDATE chats SET starred = ? WHERE id = ?", (int(starred), chat_id))
        await self._db.commit()
        return await self.get_chat(chat_id)

    async def delete_chat(self, chat_id: str) -> bool:
        cursor = await self._db.execute("DELETE FROM chats WHERE id = ?", (chat_id,))
        await self._db.commit()
        return cursor.rowcount > 0

    async def add_message(self, chat_id: str, role: str, content: str) -> StoredMessage | None:
        async with self._db.execute("SELECT 1 FROM chats WHERE id = ?", (chat_id,)) as cursor:
            if await cursor.fetchone() is None:
                return None

        message = StoredMessage(role=role, content=content)
        await self._db.execute(
            """
            INSERT INTO messages (id, chat_id, role, content, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (message.id, chat_id, message.role, message.content, message.timestamp.isoformat())
        )
        await self._db.execute(
            "UPDATE chats SET timestamp = ? WHERE id = ?",
            (utc_now().isoformat(), chat_id)
        )
        await self._db.commit()
        return message

    async def get_settings(self) -> AppSettings:
        async with self._db.execute(
            "SELECT value FROM settings WHERE key = ?", (_SETTINGS_KEY,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return AppSettings()
        return AppSettings.model_validate_json(row[0])

    async def save_settings(self, settings: AppSettings) -> None:
        await self._db.execute(
            """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (_SETTINGS_KEY, settings.model_dump_json())
        )
        await self._db.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
