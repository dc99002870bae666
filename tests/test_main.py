"""Tests for entry-point wiring."""

import pytest

from coach.chat.log_store import ChatLogStore
from coach.main import create_pipeline
from coach.opportunities.profiles import SqlProfileStore
from coach.opportunities.store import SqlOpportunityStore


@pytest.fixture(autouse=True)
def _reset_singletons(monkeypatch):
    monkeypatch.setattr("coach.config.settings.chat_endpoint_url", "")
    monkeypatch.setattr("coach.config.settings.anthropic_api_key", "")
    for cls in (SqlOpportunityStore, SqlProfileStore, ChatLogStore):
        cls._reset()
    yield
    for cls in (SqlOpportunityStore, SqlProfileStore, ChatLogStore):
        cls._reset()


def test_create_pipeline_without_chat_log(monkeypatch) -> None:
    monkeypatch.setattr("coach.config.settings.chat_log_enabled", False)
    pipeline = create_pipeline()
    assert pipeline._chat_log is None
    assert pipeline._backends == []


def test_create_pipeline_with_chat_log(monkeypatch) -> None:
    monkeypatch.setattr("coach.config.settings.chat_log_enabled", True)
    pipeline = create_pipeline()
    assert pipeline._chat_log is ChatLogStore.get()
