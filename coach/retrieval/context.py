"""Retrieval context assembly for one conversation turn."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any

from coach.config import settings
from coach.retrieval.scoring import (
    DEFAULT_TABLES,
    RelevanceScore,
    ScoringTables,
    score,
    select_top,
)

if TYPE_CHECKING:
    from coach.chat.session import Message
    from coach.opportunities.models import UserProfilePreferences
    from coach.opportunities.profiles import ProfileStore
    from coach.opportunities.store import OpportunityStore

logger = logging.getLogger(__name__)


@dataclass
class RetrievalContext:
    """Top-ranked records, the profile and recent turns for one turn."""

    candidates: list[RelevanceScore] = field(default_factory=list)
    profile: UserProfilePreferences | None = None
    recent_turns: list[Message] = field(default_factory=list)

    @property
    def context_used(self) -> bool:
        return bool(self.candidates) or self.profile is not None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready form sent to remote backends."""
        return {
            "contextUsed": self.context_used,
            "candidates": [
                {**item.record.model_dump(), "relevanceScore": item.score}
                for item in self.candidates
            ],
            "profile": self.profile.model_dump() if self.profile else None,
            "recentTurns": [m.to_payload() for m in self.recent_turns],
        }


class ContextAssembler:
    """Builds a ``RetrievalContext`` from the stores and the scoring engine.

    Store failures are logged and degrade to empty results; ``build()``
    never raises.
    """

    def __init__(
        self,
        opportunities: OpportunityStore,
        profiles: ProfileStore,
        tables: ScoringTables | None = None,
        pool_size: int | None = None,
    ) -> None:
        self._opportunities = opportunities
        self._profiles = profiles
        self._tables = tables or replace(
            DEFAULT_TABLES, min_score=settings.min_relevance_score, top_k=settings.top_k
        )
        self._pool_size = pool_size or settings.candidate_pool_size

    async def build(
        self,
        query_text: str,
        user_id: str | None,
        *,
        recent_turns: Sequence[Message] = (),
        now: datetime | None = None,
    ) -> RetrievalContext:
        context = RetrievalContext(recent_turns=list(recent_turns))
        if not user_id:
            logger.debug("No user identity; skipping retrieval")
            return context

        records, profile = await asyncio.gather(
            self._opportunities.query_recent(self._pool_size),
            self._profiles.get_profile(user_id),
            return_exceptions=True,
        )
        records_failed = isinstance(records, BaseException)
        profile_failed = isinstance(profile, BaseException)

        if records_failed and profile_failed:
            logger.error(
                "Retrieval failed for both stores: opportunities=%r profile=%r",
                records,
                profile,
            )
            return context
        if records_failed:
            logger.warning("Opportunity query failed: %r", records)
            records = []
        if profile_failed:
            logger.warning("Profile lookup failed for %s: %r", user_id, profile)
            profile = None

        context.profile = profile
        history_text = [m.content for m in recent_turns]
        try:
            scored = [
                RelevanceScore(
                    record,
                    score(
                        record,
                        query_text,
                        profile,
                        self._tables,
                        recent_turns=history_text,
                        now=now,
                    ),
                )
                for record in records
            ]
        except Exception:
            logger.exception("Scoring failed; continuing without candidates")
            scored = []
        context.candidates = select_top(scored, self._tables)

        logger.info(
            "Retrieval context: %d of %d record(s) selected, profile=%s",
            len(context.candidates),
            len(records),
            profile is not None,
        )
        return context
