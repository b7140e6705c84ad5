"""SQLite storage implementation."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import (
    Attachment,
    Conversation,
    ConversationSummary,
    Message,
    User,
)


class IStorage(Protocol):
    """Persistent storage for accounts and conversations (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Users
    async def create_user(self, user: User) -> None:
        """Insert a new user. Raises sqlite3.IntegrityError on duplicate email."""
        ...

    async def get_user(self, user_id: str) -> User | None:
        """Get a user by ID."""
        ...

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by (lowercase) email."""
        ...

    async def touch_user(self, user_id: str, when: datetime) -> None:
        """Set a user's updated_at."""
        ...

    # Conversations
    async def save_conversation(self, conversation: Conversation) -> None:
        """Insert or replace a conversation and all of its messages."""
        ...

    async def get_conversation(
        self, conversation_id: str, user_id: str
    ) -> Conversation | None:
        """Get a conversation owned by user_id."""
        ...

    async def get_conversation_owner(self, conversation_id: str) -> str | None:
        """Get the user_id owning a conversation, if it exists."""
        ...

    async def list_conversations(
        self, user_id: str, limit: int | None = None
    ) -> list[ConversationSummary]:
        """List a user's conversations, most recently updated first."""
        ...

    async def count_conversations(self, user_id: str) -> int:
        """Count a user's conversations."""
        ...

    async def delete_conversation(self, conversation_id: str, user_id: str) -> bool:
        """Delete a conversation owned by user_id. Returns whether it existed."""
        ...

    async def delete_old_conversations(self, user_id: str, keep: int) -> int:
        """Keep the `keep` most recent conversations, delete the rest."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


def _ts(value: datetime) -> str:
    # Fixed-width UTC text so ORDER BY on the column is chronological
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_ts(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None
        # One shared connection: writes must not interleave across awaits
        self._write_lock = asyncio.Lock()

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialized write; commits on success, rolls back on any error."""
        conn = self._require_conn()
        async with self._write_lock:
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    # Users
    async def create_user(self, user: User) -> None:
        """Insert a new user. Raises sqlite3.IntegrityError on duplicate email."""
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO users (id, name, email, password_hash, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user.id,
                    user.name,
                    user.email.lower(),
                    user.password_hash,
                    _ts(user.created_at),
                    _ts(user.updated_at),
                ),
            )

    async def _fetch_user(self, column: str, value: str) -> User | None:
        conn = self._require_conn()

        cursor = await conn.execute(
            f"""
            SELECT id, name, email, password_hash, created_at, updated_at
            FROM users
            WHERE {column} = ?
            """,
            (value,),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return User(
            id=row[0],
            name=row[1],
            email=row[2],
            password_hash=row[3],
            created_at=_parse_ts(row[4]),
            updated_at=_parse_ts(row[5]),
        )

    async def get_user(self, user_id: str) -> User | None:
        """Get a user by ID."""
        return await self._fetch_user("id", user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by (lowercase) email."""
        return await self._fetch_user("email", email.lower())

    async def touch_user(self, user_id: str, when: datetime) -> None:
        """Set a user's updated_at."""
        async with self._transaction() as conn:
            await conn.execute(
                "UPDATE users SET updated_at = ? WHERE id = ?",
                (_ts(when), user_id),
            )

    # Conversations
    async def save_conversation(self, conversation: Conversation) -> None:
        """Insert or replace a conversation and all of its messages."""
        async with self._transaction() as conn:
            await self._write_conversation(conn, conversation)

    async def _write_conversation(
        self, conn: aiosqlite.Connection, conversation: Conversation
    ) -> None:
        await conn.execute(
            """
            INSERT OR REPLACE INTO conversations
            (id, user_id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                conversation.id,
                conversation.user_id,
                conversation.title,
                _ts(conversation.created_at),
                _ts(conversation.updated_at),
            ),
        )

        # Replace the transcript wholesale
        await conn.execute(
            "DELETE FROM attachments WHERE conversation_id = ?", (conversation.id,)
        )
        await conn.execute(
            "DELETE FROM messages WHERE conversation_id = ?", (conversation.id,)
        )

        for position, message in enumerate(conversation.messages):
            await conn.execute(
                """
                INSERT INTO messages
                (conversation_id, position, id, role, content, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    conversation.id,
                    position,
                    message.id,
                    message.role,
                    message.content,
                    _ts(message.timestamp),
                ),
            )
            for att_position, attachment in enumerate(message.attachments):
                await conn.execute(
                    """
                    INSERT INTO attachments
                    (conversation_id, message_position, position, id, type, url,
                     name, size, mime_type)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        conversation.id,
                        position,
                        att_position,
                        attachment.id,
                        attachment.type,
                        attachment.url,
                        attachment.name,
                        attachment.size,
                        attachment.mime_type,
                    ),
                )

    async def _get_messages(self, conversation_id: str) -> list[Message]:
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT position, id, role, content, timestamp
            FROM messages
            WHERE conversation_id = ?
            ORDER BY position ASC
            """,
            (conversation_id,),
        )
        rows = await cursor.fetchall()

        att_cursor = await conn.execute(
            """
            SELECT message_position, id, type, url, name, size, mime_type
            FROM attachments
            WHERE conversation_id = ?
            ORDER BY message_position ASC, position ASC
            """,
            (conversation_id,),
        )
        attachments: dict[int, list[Attachment]] = {}
        for att in await att_cursor.fetchall():
            attachments.setdefault(att[0], []).append(
                Attachment(
                    id=att[1],
                    type=att[2],
                    url=att[3],
                    name=att[4],
                    size=att[5],
                    mime_type=att[6],
                )
            )

        return [
            Message(
                id=row[1],
                role=row[2],
                content=row[3],
                timestamp=_parse_ts(row[4]),
                attachments=attachments.get(row[0], []),
            )
            for row in rows
        ]

    async def get_conversation(
        self, conversation_id: str, user_id: str
    ) -> Conversation | None:
        """Get a conversation owned by user_id."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT id, user_id, title, created_at, updated_at
            FROM conversations
            WHERE id = ? AND user_id = ?
            """,
            (conversation_id, user_id),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return Conversation(
            id=row[0],
            user_id=row[1],
            title=row[2],
            created_at=_parse_ts(row[3]),
            updated_at=_parse_ts(row[4]),
            messages=await self._get_messages(row[0]),
        )

    async def get_conversation_owner(self, conversation_id: str) -> str | None:
        """Get the user_id owning a conversation, if it exists."""
        conn = self._require_conn()

        cursor = await conn.execute(
            "SELECT user_id FROM conversations WHERE id = ?", (conversation_id,)
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def list_conversations(
        self, user_id: str, limit: int | None = None
    ) -> list[ConversationSummary]:
        """List a user's conversations, most recently updated first."""
        conn = self._require_conn()

        query = """
            SELECT c.id, c.title, c.created_at, c.updated_at,
                   (SELECT COUNT(*) FROM messages m WHERE m.conversation_id = c.id)
            FROM conversations c
            WHERE c.user_id = ?
            ORDER BY c.updated_at DESC
        """
        params: list = [user_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            ConversationSummary(
                id=row[0],
                title=row[1],
                created_at=_parse_ts(row[2]),
                updated_at=_parse_ts(row[3]),
                message_count=row[4],
            )
            for row in rows
        ]

    async def count_conversations(self, user_id: str) -> int:
        """Count a user's conversations."""
        conn = self._require_conn()

        cursor = await conn.execute(
            "SELECT COUNT(*) FROM conversations WHERE user_id = ?", (user_id,)
        )
        row = await cursor.fetchone()
        return row[0]

    async def _delete_ids(
        self, conn: aiosqlite.Connection, conversation_ids: list[str]
    ) -> None:
        for table, column in (
            ("attachments", "conversation_id"),
            ("messages", "conversation_id"),
            ("conversations", "id"),
        ):
            await conn.executemany(
                f"DELETE FROM {table} WHERE {column} = ?",
                [(conversation_id,) for conversation_id in conversation_ids],
            )

    async def delete_conversation(self, conversation_id: str, user_id: str) -> bool:
        """Delete a conversation owned by user_id. Returns whether it existed."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                "SELECT 1 FROM conversations WHERE id = ? AND user_id = ?",
                (conversation_id, user_id),
            )
            if not await cursor.fetchone():
                return False

            await self._delete_ids(conn, [conversation_id])
        return True

    async def delete_old_conversations(self, user_id: str, keep: int) -> int:
        """Keep the `keep` most recent conversations, delete the rest."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                SELECT id FROM conversations
                WHERE user_id = ?
                ORDER BY updated_at DESC
                LIMIT -1 OFFSET ?
                """,
                (user_id, keep),
            )
            stale = [row[0] for row in await cursor.fetchall()]

            if stale:
                await self._delete_ids(conn, stale)
        return len(stale)

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        tables = [
            "attachments",
            "messages",
            "conversations",
            "users",
        ]

        async with self._transaction() as conn:
            for table in tables:
                await conn.execute(f"DELETE FROM {table}")
