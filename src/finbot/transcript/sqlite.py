"""SQLite transcript store.

Provides persistent transcript storage using a SQLite key-value table.
Uses aiosqlite for async access.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from .base import TRANSCRIPT_KEY, TranscriptStore


class SQLiteTranscriptStore(TranscriptStore):
    """SQLite-backed transcript store.

    Stores snapshots in a single ``kv`` table of a SQLite database file.
    Supports persistent storage across sessions.
    """

    def __init__(
        self,
        path: str | Path = "~/.finbot/transcript.db",
        key: str = TRANSCRIPT_KEY,
    ):
        super().__init__(key)
        self._db_path = Path(path).expanduser()
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database connection and create the schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite transcript store is not connected")
        return self._connection

    async def _read(self, key: str) -> str | None:
        async with self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def _write(self, key: str, blob: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self._conn.execute("""
            INSERT INTO kv (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, blob, now))
        await self._conn.commit()

    async def _delete(self, key: str) -> None:
        await self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        await self._conn.commit()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def backend_type(self) -> str:
        return "sqlite"
