"""Opportunity and profile snapshots read from the document store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

UNSPECIFIED_DEADLINES = {"", "not specified", "unspecified", "rolling", "n/a", "tbd"}

_DEADLINE_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)

# Larger epoch values are taken as milliseconds (1e11 s is the year 5138).
_MS_EPOCH_THRESHOLD = 100_000_000_000


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, list | tuple | set):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _normalize_deadline(value: Any) -> str | None:
    """Turn store timestamp shapes into a plain string (or None)."""
    if value is None:
        return None
    if isinstance(value, dict) and "seconds" in value:
        value = value["seconds"]
    if isinstance(value, int | float):
        if abs(value) >= _MS_EPOCH_THRESHOLD:
            value = value / 1000
        try:
            return datetime.fromtimestamp(value, tz=UTC).isoformat()
        except (ValueError, OverflowError, OSError):
            return None
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def parse_deadline(deadline: str | None) -> datetime | None:
    """Parse a deadline string into an aware datetime, or None if unparseable."""
    if deadline is None or deadline.strip().lower() in UNSPECIFIED_DEADLINES:
        return None
    text = deadline.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _DEADLINE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class OpportunityRecord(BaseModel):
    """A scholarship, fellowship, job or program listing."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    provider: str = ""
    summary: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    deadline: str | None = None
    amount: str = ""
    location: str = ""
    created_at: str = ""

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> OpportunityRecord:
        """Build a record from a raw store document, applying all defaults."""
        return cls(
            id=doc_id,
            title=_as_text(data.get("title")),
            provider=_as_text(data.get("provider") or data.get("organization")),
            summary=_as_text(data.get("summary")),
            description=_as_text(data.get("description")),
            category=_as_text(data.get("category")),
            tags=_as_list(data.get("tags")),
            deadline=_normalize_deadline(data.get("deadline")),
            amount=_as_text(data.get("amount") or data.get("value")),
            location=_as_text(data.get("location")),
            created_at=_normalize_deadline(data.get("createdAt") or data.get("created_at")) or "",
        )

    @property
    def searchable_text(self) -> str:
        return " ".join(
            [
                self.title,
                self.summary,
                self.description,
                self.category,
                self.provider,
                self.location,
                *self.tags,
            ]
        ).lower()

    @property
    def deadline_at(self) -> datetime | None:
        return parse_deadline(self.deadline)


class UserProfilePreferences(BaseModel):
    """The preferences part of a user profile."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    interests: list[str] = Field(default_factory=list)
    education_level: str = ""
    skills: list[str] = Field(default_factory=list)
    preferred_locations: list[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> UserProfilePreferences:
        """Read either a flat document or the nested ``preferences`` shape."""
        prefs = data.get("preferences") or data
        return cls(
            name=_as_text(data.get("name")),
            interests=_as_list(prefs.get("careerInterests") or prefs.get("interests")),
            education_level=_as_text(
                prefs.get("educationLevel") or prefs.get("education_level")
            ),
            skills=_as_list(prefs.get("currentSkills") or prefs.get("skills")),
            preferred_locations=_as_list(
                prefs.get("preferredLocations") or prefs.get("preferred_locations")
            ),
        )
