"""SQLite implementation of the mapping store."""

import asyncio
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

from ..exceptions import AlreadyExistsError, StoreError
from .base import MappingStore, validate_limit
from .models import ShortLink


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS short_links (
	code TEXT PRIMARY KEY,
	original_url TEXT NOT NULL,
	created_at TEXT NOT NULL,
	hit_count INTEGER NOT NULL DEFAULT 0,
	last_accessed TEXT
);

CREATE INDEX IF NOT EXISTS idx_short_links_created_at ON short_links (created_at);
"""

SELECT_COLUMNS = "code, original_url, created_at, hit_count, last_accessed"


def parse_sqlite_path(store_url: str) -> str:
    """Extract the database file path from a sqlite:/// URL.

    sqlite:///links.db is relative to the working directory,
    sqlite:////var/lib/links.db is absolute.
    """
    parsed = urlparse(store_url)
    path = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
    if not path or path == ":memory:":
        raise ValueError(f"SQLite store needs a file path, got '{store_url}'")
    return path


class SQLiteStore(MappingStore):
    """Mapping store kept in a single SQLite file.

    Every operation opens its own connection in a worker thread, so the event
    loop never blocks on disk I/O. Uniqueness comes from the primary key:
    INSERT OR IGNORE reports a lost race through rowcount == 0.
    """

    def __init__(
        self,
        store_url: str,
        create_tables: bool = True,
        timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite store.

        Args:
            store_url: sqlite:///path/to/file.db
            create_tables: Create the schema if missing
            timeout_seconds: How long a writer waits on a locked database
            logger: Optional logger instance
        """
        super().__init__(store_url, logger)
        self.path = parse_sqlite_path(store_url)
        self.timeout_seconds = timeout_seconds

        if create_tables:
            self._ensure_db()

    def _ensure_db(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with self._get_conn() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        self.logger.info(f"SQLite store ready at {self.path}")

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.path, timeout=self.timeout_seconds)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            self.logger.error(f"SQLite error in {func.__name__}: {e}")
            raise StoreError(str(e)) from e

    # Blocking helpers, executed via _run

    def _insert(self, code: str, original_url: str, created_at: datetime) -> bool:
        with self._get_conn() as conn:
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO short_links (code, original_url, created_at, hit_count)
                VALUES (?, ?, ?, 0)
                """,
                (code, original_url, created_at.isoformat()),
            )
            conn.commit()
            return cur.rowcount == 1

    def _select(self, code: str) -> Optional[dict]:
        with self._get_conn() as conn:
            row = conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM short_links WHERE code = ?",
                (code,),
            ).fetchone()
            return dict(row) if row else None

    def _increment(self, code: str, accessed_at: datetime) -> bool:
        with self._get_conn() as conn:
            cur = conn.execute(
                """
                UPDATE short_links
                SET hit_count = hit_count + 1, last_accessed = ?
                WHERE code = ?
                """,
                (accessed_at.isoformat(), code),
            )
            conn.commit()
            return cur.rowcount == 1

    def _count(self) -> int:
        with self._get_conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM short_links").fetchone()[0]

    def _select_recent(self, limit: int) -> List[dict]:
        with self._get_conn() as conn:
            rows = conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM short_links ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return [dict(row) for row in rows]

    # MappingStore interface

    async def put(
        self,
        code: str,
        original_url: str,
        created_at: Optional[datetime] = None,
    ) -> ShortLink:
        if created_at is None:
            created_at = datetime.now(timezone.utc)
        elif created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        inserted = await self._run(self._insert, code, original_url, created_at)
        if not inserted:
            raise AlreadyExistsError(code)

        self.logger.debug(f"Stored {code} -> {original_url}")
        return ShortLink(code=code, original_url=original_url, created_at=created_at)

    async def get(self, code: str) -> Optional[ShortLink]:
        row = await self._run(self._select, code)
        return ShortLink.from_dict(row) if row else None

    async def increment_hit(self, code: str) -> bool:
        return await self._run(self._increment, code, datetime.now(timezone.utc))

    async def size(self) -> int:
        return await self._run(self._count)

    async def list_recent(self, limit: int = 100) -> List[ShortLink]:
        rows = await self._run(self._select_recent, validate_limit(limit))
        return [ShortLink.from_dict(row) for row in rows]

    async def close(self) -> None:
        # Connections are per-operation; nothing is held open.
        self.logger.debug(f"Closed SQLite store at {self.path}")
