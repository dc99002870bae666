"""ChatLogStore: persisted record of completed turns via libsql.

Logging a turn is best-effort: a failed write is logged and never reaches
the user.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from coach.db import Database

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS chat_log (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id      TEXT NOT NULL,
    user_id         TEXT,
    message         TEXT NOT NULL,
    response        TEXT NOT NULL,
    source          TEXT NOT NULL,
    opportunity_ids TEXT NOT NULL DEFAULT '[]',
    created_at      TEXT NOT NULL
)
"""


class ChatLogStore:
    """Singleton accessed via ``ChatLogStore.get()``.  Pass an explicit
    *db_path* for test isolation.
    """

    _instance: ChatLogStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db = Database(_CREATE_TABLE, db_path)

    @classmethod
    def get(cls) -> ChatLogStore:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    async def record_turn(
        self,
        session_id: str,
        user_id: str | None,
        message: str,
        response: str,
        source: str,
        opportunity_ids: list[str] | None = None,
    ) -> bool:
        """Store one turn. Returns False (after logging) if the write failed."""
        try:
            await self._db.write(
                """
                INSERT INTO chat_log
                    (session_id, user_id, message, response, source,
                     opportunity_ids, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    user_id,
                    message,
                    response,
                    source,
                    json.dumps(opportunity_ids or []),
                    datetime.now(UTC).isoformat(),
                ),
            )
        except Exception:
            logger.exception("Failed to record chat turn for session %s", session_id)
            return False
        return True

    async def recent(self, session_id: str, limit: int = 15) -> list[dict]:
        """Newest-first turns for a session."""
        rows = await self._db.fetch(
            """
            SELECT session_id, user_id, message, response, source,
                   opportunity_ids, created_at
            FROM chat_log
            WHERE session_id = ?
            ORDER BY id DESC
            LIMIT ?
            """,
            (session_id, limit),
        )
        return [
            {
                "session_id": row[0],
                "user_id": row[1],
                "message": row[2],
                "response": row[3],
                "source": row[4],
                "opportunity_ids": json.loads(row[5]),
                "created_at": row[6],
            }
            for row in rows
        ]
