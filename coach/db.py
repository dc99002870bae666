"""Per-store access to the coach database over libsql.

Each SQL store owns a ``Database``: its schema plus the target it reads and
writes. A call opens a connection, runs in a worker thread via
``asyncio.to_thread()`` (the ``libsql`` driver is synchronous) and closes
it again. The schema is applied on the first call.

Target selection:

- an explicit *db_path* (test isolation) wins
- else ``TURSO_DATABASE_URL`` + ``TURSO_AUTH_TOKEN`` → hosted Turso
- else the SQLite file at ``settings.database_path``
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import libsql

from coach.config import settings

logger = logging.getLogger(__name__)


def _open(db_path: Path | None) -> Any:
    if db_path is None and settings.turso_database_url:
        return libsql.connect(
            database=settings.turso_database_url, auth_token=settings.turso_auth_token
        )
    path = db_path or settings.database_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = libsql.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


class Database:
    """Schema-aware connection target for one store."""

    def __init__(self, schema: str, db_path: Path | None = None) -> None:
        self._schema = schema
        self._db_path = db_path
        self._initialised = False

    def _run(self, sql: str, params: tuple, *, write: bool) -> list[tuple]:
        conn = _open(self._db_path)
        try:
            if not self._initialised:
                conn.execute(self._schema)
                conn.commit()
                self._initialised = True
                logger.debug("Schema ready: %s", self._schema.split("(")[0].strip())
            cursor = conn.execute(sql, params)
            if write:
                conn.commit()
                return []
            return cursor.fetchall()
        finally:
            conn.close()

    async def fetch(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Run a query and return every row."""
        return await asyncio.to_thread(self._run, sql, params, write=False)

    async def write(self, sql: str, params: tuple = ()) -> None:
        """Run a statement and commit it."""
        await asyncio.to_thread(self._run, sql, params, write=True)
