"""Tests for system prompt assembly."""

from coach.chat.prompt import build_system_prompt, persona, summarize_context
from coach.opportunities.models import UserProfilePreferences
from coach.retrieval.context import RetrievalContext
from coach.retrieval.scoring import RelevanceScore


def test_persona_uses_assistant_name() -> None:
    assert "You are Edutu AI" in persona()


def test_system_prompt_without_context() -> None:
    blocks = build_system_prompt()
    assert len(blocks) == 2
    assert blocks[0]["cache_control"] == {"type": "ephemeral"}
    assert blocks[1]["text"].startswith("Today's date:")


def test_system_prompt_with_context(cs_fellowship, profile) -> None:
    context = RetrievalContext(candidates=[RelevanceScore(cs_fellowship, 18)], profile=profile)
    blocks = build_system_prompt(context)

    assert len(blocks) == 3
    summary = blocks[2]["text"]
    assert "## User Profile" in summary
    assert "Name: Amara" in summary
    assert "## Relevant Opportunities" in summary
    assert "Graduate Computer Science Fellowship (Tech Futures Foundation) - Technology" in summary
    assert "cache_control" not in blocks[2]


def test_empty_profile_adds_nothing() -> None:
    context = RetrievalContext(profile=UserProfilePreferences())
    assert summarize_context(context) == ""
    assert len(build_system_prompt(context)) == 2
