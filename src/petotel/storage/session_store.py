"""SQLite-backed store for checkout contexts bridging payment and confirmation."""
from __future__ import annotations

import asyncio
import json
import logging
import secrets
import sqlite3
import time
from pathlib import Path
from typing import Optional

from petotel.hotels.models import CheckoutContext

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

MIGRATIONS: dict[int, str] = {
    1: """
    CREATE TABLE IF NOT EXISTS checkout_sessions (
        checkout_id TEXT PRIMARY KEY,
        context TEXT NOT NULL,
        created_at REAL NOT NULL,
        expires_at REAL NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_checkout_sessions_expires_at
        ON checkout_sessions (expires_at);
    """,
}


def new_checkout_id() -> str:
    return secrets.token_urlsafe(18)


class CheckoutSessionStore:
    """Thin async wrapper over sqlite3 with create / read / delete lifecycle.

    Each checkout attempt owns one row keyed by its generated identifier. Rows past
    their TTL read as absent, mirroring a browser session that has gone away.
    """

    def __init__(self, db_path: Path, *, ttl_s: float = 3600.0, busy_timeout_ms: int = 2000) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be positive")
        self._path = db_path
        self._ttl_s = ttl_s
        self._busy_timeout_ms = busy_timeout_ms
        self._connection: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # lifecycle

    async def initialize(self) -> None:
        if self._connection is not None:
            return
        async with self._lock:
            if self._connection is None:
                self._connection = await asyncio.to_thread(self._open_connection)

    async def close(self) -> None:
        if self._connection is None:
            return
        conn = self._connection
        self._connection = None
        await asyncio.to_thread(conn.close)

    def _open_connection(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.execute(f"PRAGMA busy_timeout = {int(max(self._busy_timeout_ms, 0))};")
        try:
            self._apply_migrations(conn)
        except sqlite3.OperationalError as exc:
            conn.close()
            logger.error("Session store migration failed (path=%s): %s", self._path, exc)
            raise
        return conn

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            """
        )
        row = conn.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()
        current = int(row[0]) if row else 0
        if current >= SCHEMA_VERSION:
            return
        for version in range(current + 1, SCHEMA_VERSION + 1):
            script = MIGRATIONS.get(version)
            if not script:
                raise RuntimeError(f"Missing migration script for version {version}")
            conn.executescript(script)
        conn.execute(
            "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
        conn.commit()

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("CheckoutSessionStore.initialize() must be awaited first")
        return self._connection

    # ------------------------------------------------------------------
    # operations

    async def create(self, context: CheckoutContext, *, checkout_id: Optional[str] = None) -> str:
        checkout_id = checkout_id or new_checkout_id()
        payload = json.dumps(context.to_dict(), separators=(",", ":"))
        now = time.time()
        conn = self._require_connection()
        async with self._lock:
            purged = await asyncio.to_thread(self._insert, conn, checkout_id, payload, now, now + self._ttl_s)
        if purged:
            logger.info("Purged %s expired checkout contexts", purged)
        logger.info("Stored checkout context %s for hotel %s", checkout_id, context.hotel_id)
        return checkout_id

    @staticmethod
    def _insert(conn: sqlite3.Connection, checkout_id: str, payload: str, now: float, expires_at: float) -> int:
        purged = conn.execute("DELETE FROM checkout_sessions WHERE expires_at <= ?", (now,)).rowcount
        conn.execute(
            """
            INSERT OR REPLACE INTO checkout_sessions (checkout_id, context, created_at, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            (checkout_id, payload, now, expires_at),
        )
        conn.commit()
        return purged

    async def read(self, checkout_id: str) -> Optional[CheckoutContext]:
        conn = self._require_connection()
        async with self._lock:
            row = await asyncio.to_thread(
                lambda: conn.execute(
                    "SELECT context FROM checkout_sessions WHERE checkout_id = ? AND expires_at > ?",
                    (checkout_id, time.time()),
                ).fetchone()
            )
        if row is None:
            return None
        try:
            return CheckoutContext.from_dict(json.loads(row[0]))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.warning("Discarding unreadable checkout context %s", checkout_id)
            await self.delete(checkout_id)
            return None

    async def delete(self, checkout_id: str) -> bool:
        conn = self._require_connection()
        async with self._lock:
            deleted = await asyncio.to_thread(self._delete, conn, checkout_id)
        if deleted:
            logger.info("Cleared checkout context %s", checkout_id)
        return deleted

    @staticmethod
    def _delete(conn: sqlite3.Connection, checkout_id: str) -> bool:
        cursor = conn.execute("DELETE FROM checkout_sessions WHERE checkout_id = ?", (checkout_id,))
        conn.commit()
        return cursor.rowcount > 0

    async def purge_expired(self) -> int:
        conn = self._require_connection()

        def _purge() -> int:
            cursor = conn.execute("DELETE FROM checkout_sessions WHERE expires_at <= ?", (time.time(),))
            conn.commit()
            return cursor.rowcount

        async with self._lock:
            removed = await asyncio.to_thread(_purge)
        if removed:
            logger.info("Purged %s expired checkout contexts", removed)
        return removed
