"""Read access to user profile preferences."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from coach.db import Database
from coach.opportunities.models import UserProfilePreferences

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id    TEXT PRIMARY KEY,
    document   TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class ProfileStore(Protocol):
    async def get_profile(self, user_id: str) -> UserProfilePreferences | None:
        """Return the user's preferences, or None if there is no profile."""
        ...


class InMemoryProfileStore:
    def __init__(self, profiles: dict[str, UserProfilePreferences] | None = None) -> None:
        self._profiles = dict(profiles or {})

    def set(self, user_id: str, profile: UserProfilePreferences) -> None:
        self._profiles[user_id] = profile

    async def get_profile(self, user_id: str) -> UserProfilePreferences | None:
        return self._profiles.get(user_id)


class SqlProfileStore:
    """User profile documents in SQLite / Turso.

    Singleton accessed via ``SqlProfileStore.get()``.  Pass an explicit
    *db_path* for test isolation.
    """

    _instance: SqlProfileStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db = Database(_CREATE_TABLE, db_path)

    @classmethod
    def get(cls) -> SqlProfileStore:
        """Return the shared store instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    async def save(self, user_id: str, document: dict[str, Any]) -> None:
        """Insert or replace the raw profile document for *user_id*."""
        await self._db.write(
            """
            INSERT OR REPLACE INTO user_profiles (user_id, document, updated_at)
            VALUES (?, ?, ?)
            """,
            (user_id, json.dumps(document), datetime.now(UTC).isoformat()),
        )
        logger.debug("Stored profile for %s", user_id)

    async def get_profile(self, user_id: str) -> UserProfilePreferences | None:
        rows = await self._db.fetch(
            "SELECT document FROM user_profiles WHERE user_id = ?", (user_id,)
        )
        if not rows:
            return None
        return UserProfilePreferences.from_document(json.loads(rows[0][0]))
