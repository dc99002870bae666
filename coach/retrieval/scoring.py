"""Relevance scoring of opportunity records against a query and a profile.

Scoring is a weighted additive heuristic. Every weight and keyword list is
held in ``ScoringTables`` so callers can tune ranking without touching the
algorithm. ``score()`` is pure: identical inputs (including ``now``) always
give the same number.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from coach.opportunities.models import OpportunityRecord, UserProfilePreferences

_TOKEN_RE = re.compile(r"[a-z0-9+#]+")


@dataclass(frozen=True)
class CategoryRule:
    """Query words that signal a category, and record words that confirm it."""

    name: str
    query_keywords: tuple[str, ...]
    record_keywords: tuple[str, ...]
    weight: float = 3


DEFAULT_CATEGORIES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "technology",
        ("tech", "technology", "software", "computer", "computing", "programming",
         "coding", "data", "engineering", "ai"),
        ("tech", "software", "computer", "computing", "engineering", "data", "stem"),
        weight=4,
    ),
    CategoryRule(
        "business",
        ("business", "entrepreneur", "entrepreneurship", "startup", "finance",
         "management", "marketing", "mba"),
        ("business", "entrepreneur", "startup", "finance", "management", "mba"),
    ),
    CategoryRule(
        "health",
        ("health", "healthcare", "medical", "medicine", "nursing", "pharmacy"),
        ("health", "medic", "nursing", "pharma", "clinical"),
    ),
    CategoryRule(
        "education",
        ("education", "teaching", "teacher", "pedagogy"),
        ("education", "teaching", "teacher"),
    ),
    CategoryRule(
        "arts",
        ("art", "arts", "design", "music", "film", "creative", "writing"),
        ("art", "design", "music", "film", "creative"),
    ),
)

DEFAULT_STOP_WORDS = frozenset({
    "the", "and", "for", "can", "you", "how", "what", "help", "are", "with",
    "this", "that", "need", "want", "about", "any", "some", "have", "get",
    "find", "looking", "please", "tell", "show", "would", "like", "which",
    "where", "when", "who", "your", "from", "into", "there", "their", "them",
    "will", "just", "also", "but", "not", "all", "was", "has", "had", "its",
})


@dataclass(frozen=True)
class ScoringTables:
    """Weights, keyword sets and thresholds used by ``score()`` and ``select_top()``."""

    base: float = 1
    intent_keywords: tuple[str, ...] = (
        "scholarship", "funding", "grant", "financial aid", "tuition",
        "study", "apply", "opportunity", "fellowship", "bursary",
    )
    intent_weight: float = 3
    intent_cap: int = 4
    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    min_token_length: int = 3
    title_weight: float = 5
    provider_weight: float = 3
    text_weight: float = 2
    interest_weight: float = 6
    interest_word_weight: float = 2
    interest_word_min_length: int = 4
    education_weight: float = 4
    # (profile level contains X) -> any of these in the record text also counts
    education_equivalents: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("high school", ("undergraduate", "freshman", "first year")),
        ("secondary", ("undergraduate", "freshman", "first year")),
        ("bachelor", ("undergraduate", "bachelor")),
        ("undergraduate", ("undergraduate", "bachelor")),
        ("master", ("graduate", "postgraduate", "masters", "master's")),
        ("doctoral", ("phd", "doctoral", "doctorate")),
        ("doctorate", ("phd", "doctoral", "doctorate")),
        ("phd", ("phd", "doctoral", "doctorate")),
    )
    skill_weight: float = 3
    location_weight: float = 2
    history_word_weight: float = 1
    history_turns: int = 4
    history_word_min_length: int = 4
    urgency_window_days: int = 365
    urgency_step_days: int = 73
    urgency_min: float = 1
    urgency_max: float = 5
    categories: tuple[CategoryRule, ...] = field(default=DEFAULT_CATEGORIES)
    min_score: float = 3
    top_k: int = 5


DEFAULT_TABLES = ScoringTables()


@dataclass(frozen=True)
class RelevanceScore:
    record: OpportunityRecord
    score: float


def tokenize(text: str, tables: ScoringTables = DEFAULT_TABLES) -> list[str]:
    """Lowercase words of at least ``min_token_length`` chars, minus stop-words."""
    return [
        token
        for token in _TOKEN_RE.findall(text.lower())
        if len(token) >= tables.min_token_length and token not in tables.stop_words
    ]


def _mentions(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", text) is not None


def _intent_score(query: str, tables: ScoringTables) -> float:
    matches = sum(1 for keyword in tables.intent_keywords if keyword in query)
    return min(matches, tables.intent_cap) * tables.intent_weight


def _overlap_score(query: str, record: OpportunityRecord, text: str, tables: ScoringTables) -> float:
    title = record.title.lower()
    provider = record.provider.lower()
    total = 0.0
    for token in tokenize(query, tables):
        if token in title:
            total += tables.title_weight
        elif token in provider:
            total += tables.provider_weight
        elif token in text:
            total += tables.text_weight
    return total


def _interest_score(interests: Sequence[str], text: str, tables: ScoringTables) -> float:
    total = 0.0
    for interest in interests:
        interest = interest.lower().strip()
        if not interest:
            continue
        if interest in text:
            total += tables.interest_weight
        words = interest.split()
        if len(words) > 1:
            total += tables.interest_word_weight * sum(
                1 for word in words
                if len(word) >= tables.interest_word_min_length and word in text
            )
    return total


def education_matches(level: str, text: str, tables: ScoringTables = DEFAULT_TABLES) -> bool:
    """True if *text* mentions the education *level* or a known equivalent."""
    level = level.lower().strip()
    if not level:
        return False
    if level in text:
        return True
    return any(
        trigger in level and any(equivalent in text for equivalent in equivalents)
        for trigger, equivalents in tables.education_equivalents
    )


def _history_score(recent_turns: Sequence[str], text: str, tables: ScoringTables) -> float:
    if not recent_turns:
        return 0.0
    words: set[str] = set()
    for turn in recent_turns[-tables.history_turns:]:
        words.update(
            word
            for word in _TOKEN_RE.findall(turn.lower())
            if len(word) >= tables.history_word_min_length and word not in tables.stop_words
        )
    return tables.history_word_weight * sum(1 for word in words if word in text)


def urgency_bonus(
    deadline: datetime | None, now: datetime, tables: ScoringTables = DEFAULT_TABLES
) -> float:
    """Bonus in [urgency_min, urgency_max] for deadlines inside the window, else 0."""
    if deadline is None:
        return 0.0
    days = (deadline - now).total_seconds() / 86400
    if not 0 < days < tables.urgency_window_days:
        return 0.0
    bonus = tables.urgency_max - math.floor(days / tables.urgency_step_days)
    return float(max(tables.urgency_min, min(tables.urgency_max, bonus)))


def _category_score(query: str, record: OpportunityRecord, text: str, tables: ScoringTables) -> float:
    category = record.category.lower()
    total = 0.0
    for rule in tables.categories:
        if not any(_mentions(query, keyword) for keyword in rule.query_keywords):
            continue
        haystack = category or text
        if any(keyword in haystack for keyword in rule.record_keywords):
            total += rule.weight
    return total


def score(
    record: OpportunityRecord,
    query_text: str,
    profile: UserProfilePreferences | None,
    tables: ScoringTables = DEFAULT_TABLES,
    *,
    recent_turns: Sequence[str] = (),
    now: datetime | None = None,
) -> float:
    """Score *record* for *query_text* and *profile*. Never negative."""
    query = query_text.lower()
    text = record.searchable_text
    now = now or datetime.now(UTC)

    total = tables.base
    total += _intent_score(query, tables)
    total += _overlap_score(query, record, text, tables)

    if profile is not None:
        total += _interest_score(profile.interests, text, tables)
        if education_matches(profile.education_level, text, tables):
            total += tables.education_weight
        total += tables.skill_weight * sum(
            1 for skill in profile.skills if skill.strip() and skill.lower() in text
        )
        total += tables.location_weight * sum(
            1 for location in profile.preferred_locations
            if location.strip() and location.lower() in text
        )

    total += _history_score(recent_turns, text, tables)
    total += urgency_bonus(record.deadline_at, now, tables)
    total += _category_score(query, record, text, tables)

    return max(0.0, total)


def select_top(
    scored: Sequence[RelevanceScore], tables: ScoringTables = DEFAULT_TABLES
) -> list[RelevanceScore]:
    """Drop scores at or below the threshold and keep the best ``top_k``.

    ``sorted`` is stable, so equal scores keep the store's order.
    """
    kept = [item for item in scored if item.score > tables.min_score]
    return sorted(kept, key=lambda item: item.score, reverse=True)[: tables.top_k]
