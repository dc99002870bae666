"""System prompt assembly for the direct LLM backend."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from coach.config import settings

if TYPE_CHECKING:
    from coach.opportunities.models import UserProfilePreferences
    from coach.retrieval.context import RetrievalContext

logger = logging.getLogger(__name__)

PERSONA = """You are {name}, an expert opportunity coach for young African professionals (ages 16-30).

Your mission: help users discover and pursue educational and career opportunities through personalized guidance.

Core capabilities:
- Find and recommend scholarships, grants, and educational opportunities
- Provide career guidance and skill development advice
- Create personalized learning and application roadmaps
- Connect users with relevant communities and mentors
- Offer motivational support and practical next steps

Communication style:
- Warm, encouraging, and professional
- Specific and actionable advice
- Focus on opportunities available to African youth globally
- Always provide concrete next steps

When discussing opportunities, reference specific programs, include deadlines and
requirements, and suggest application strategies."""


def persona() -> str:
    return PERSONA.format(name=settings.assistant_name)


def _format_profile(profile: UserProfilePreferences) -> str:
    parts = []
    if profile.name:
        parts.append(f"Name: {profile.name}")
    if profile.education_level:
        parts.append(f"Education level: {profile.education_level}")
    if profile.interests:
        parts.append(f"Interested in: {', '.join(profile.interests[:3])}")
    if profile.skills:
        parts.append(f"Skills: {', '.join(profile.skills[:3])}")
    if profile.preferred_locations:
        parts.append(f"Preferred locations: {', '.join(profile.preferred_locations[:3])}")
    if not parts:
        return ""
    return "## User Profile\n\n" + "\n".join(f"- {part}" for part in parts)


def summarize_context(context: RetrievalContext) -> str:
    """Compact text summary of the retrieved profile and opportunities."""
    sections = []
    if context.profile is not None:
        profile_text = _format_profile(context.profile)
        if profile_text:
            sections.append(profile_text)

    if context.candidates:
        lines = ["## Relevant Opportunities\n"]
        for item in context.candidates:
            record = item.record
            line = f"- {record.title} ({record.provider or 'unknown provider'})"
            if record.category:
                line += f" - {record.category}"
            if record.deadline:
                line += f" - Deadline: {record.deadline}"
            if record.summary:
                line += f"\n  {record.summary}"
            lines.append(line)
        sections.append("\n".join(lines))

    return "\n\n".join(sections)


def build_system_prompt(context: RetrievalContext | None = None) -> list[dict]:
    """Assemble the ``system`` content blocks.

    The persona block is static and carries ``cache_control``; the date and
    the retrieval summary change every turn and follow it as plain blocks.
    """
    blocks: list[dict] = [
        {
            "type": "text",
            "text": persona(),
            "cache_control": {"type": "ephemeral"},
        },
        {
            "type": "text",
            "text": f"Today's date: {datetime.now(UTC).strftime('%A, %B %d, %Y')}",
        },
    ]

    if context is not None:
        summary = summarize_context(context)
        if summary:
            blocks.append({"type": "text", "text": summary})
            logger.debug("System prompt includes %d candidate(s)", len(context.candidates))

    return blocks
