"""Shared test fixtures."""

import pytest

from coach.opportunities.models import OpportunityRecord, UserProfilePreferences


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("coach.config.settings.turso_database_url", "")


@pytest.fixture
def cs_fellowship() -> OpportunityRecord:
    return OpportunityRecord(
        id="cs-fellowship",
        title="Graduate Computer Science Fellowship",
        provider="Tech Futures Foundation",
        summary="Funding for graduate students in computing",
        category="Technology",
        tags=["stem", "africa"],
        deadline="Not specified",
        amount="$20,000",
    )


@pytest.fixture
def nursing_grant() -> OpportunityRecord:
    return OpportunityRecord(
        id="nursing-grant",
        title="Community Nursing Grant",
        provider="Health Africa",
        summary="Support for nursing diplomas",
        category="Health",
    )


@pytest.fixture
def profile() -> UserProfilePreferences:
    return UserProfilePreferences(
        name="Amara",
        interests=["data science", "software"],
        education_level="Master's",
        skills=["python"],
        preferred_locations=["Kenya"],
    )
