"""Tests for Settings configuration model."""

import pytest

from coach.config import Settings


class TestGetRemoteBackends:
    def test_none_configured(self):
        s = Settings()
        assert s.get_remote_backends() == []

    def test_http_only(self):
        s = Settings(chat_endpoint_url="https://example.com/chat")
        assert s.get_remote_backends() == ["http"]

    def test_both_in_call_order(self):
        s = Settings(chat_endpoint_url="https://example.com/chat", anthropic_api_key="sk-test")
        assert s.get_remote_backends() == ["http", "anthropic"]

    def test_blank_values_ignored(self):
        s = Settings(chat_endpoint_url="   ", anthropic_api_key="")
        assert s.get_remote_backends() == []


class TestDefaults:
    def test_history_cap(self):
        assert Settings().history_cap == 21

    def test_max_retries(self):
        assert Settings().max_retries == 2

    def test_remote_timeout_in_range(self):
        assert 10 <= Settings().remote_timeout_seconds <= 20

    def test_retrieval_bounds(self):
        s = Settings()
        assert s.candidate_pool_size == 50
        assert s.top_k == 5
        assert s.min_relevance_score == 3

    def test_turn_content_limit(self):
        assert Settings().turn_content_limit == 500

    def test_default_database_path(self):
        from pathlib import Path

        assert Settings().database_path == Path("data/coach.db")

    def test_chat_log_disabled_by_default(self):
        assert Settings().chat_log_enabled is False


class TestExtraForbidden:
    def test_unknown_env_var_raises(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(**{"nonexistent_field": "value"})
