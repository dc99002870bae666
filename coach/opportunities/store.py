"""Read access to opportunity records.

``OpportunityStore`` is the narrow interface the engine consumes. Two
implementations ship here: an in-memory store (tests, demos) and
``SqlOpportunityStore`` which keeps raw documents as JSON in libsql.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from coach.db import Database
from coach.opportunities.models import OpportunityRecord

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS opportunities (
    id         TEXT PRIMARY KEY,
    document   TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


class OpportunityStore(Protocol):
    async def query_recent(self, limit: int) -> list[OpportunityRecord]:
        """Return up to *limit* records, newest first."""
        ...


class InMemoryOpportunityStore:
    """Holds records in insertion order; the newest is the last added."""

    def __init__(self, records: list[OpportunityRecord] | None = None) -> None:
        self._records: list[OpportunityRecord] = list(records or [])

    def add(self, record: OpportunityRecord) -> None:
        self._records.append(record)

    async def query_recent(self, limit: int) -> list[OpportunityRecord]:
        return list(reversed(self._records))[:limit]


class SqlOpportunityStore:
    """Opportunity documents in SQLite / Turso.

    Singleton accessed via ``SqlOpportunityStore.get()``.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: SqlOpportunityStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db = Database(_CREATE_TABLE, db_path)

    @classmethod
    def get(cls) -> SqlOpportunityStore:
        """Return the shared store instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Write -----------------------------------------------------------------

    async def upsert(
        self, doc_id: str, document: dict[str, Any], created_at: str | None = None
    ) -> OpportunityRecord:
        """Insert or replace a raw document. Returns the normalized record.

        The document is normalized before it is written, so one that cannot
        be read back is rejected instead of stored.
        """
        created = created_at or datetime.now(UTC).isoformat()
        record = OpportunityRecord.from_document(doc_id, {**document, "createdAt": created})
        await self._db.write(
            """
            INSERT OR REPLACE INTO opportunities (id, document, created_at)
            VALUES (?, ?, ?)
            """,
            (doc_id, json.dumps(document), created),
        )
        logger.debug("Stored opportunity %s", doc_id)
        return record

    # -- Read ------------------------------------------------------------------

    async def query_recent(self, limit: int) -> list[OpportunityRecord]:
        """Newest records first. Rows that cannot be read are logged and skipped."""
        rows = await self._db.fetch(
            "SELECT id, document, created_at FROM opportunities "
            "ORDER BY created_at DESC LIMIT ?",
            (limit,),
        )

        records = []
        for doc_id, document, created_at in rows:
            try:
                data = json.loads(document)
                records.append(
                    OpportunityRecord.from_document(doc_id, {**data, "createdAt": created_at})
                )
            except json.JSONDecodeError:
                logger.warning("Skipping opportunity %s: document is not valid JSON", doc_id)
            except Exception:
                logger.exception("Skipping opportunity %s: document could not be read", doc_id)
        return records
