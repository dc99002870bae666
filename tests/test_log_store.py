"""Tests for ChatLogStore."""

from pathlib import Path
from unittest.mock import patch

import pytest

from coach.chat.log_store import ChatLogStore

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
def store(tmp_path: Path) -> ChatLogStore:
    return ChatLogStore(db_path=tmp_path / "test.db")


async def test_record_and_read_back(store: ChatLogStore) -> None:
    assert await store.record_turn("s1", "u1", "hello", "Hi there", "enriched-local", ["a", "b"])
    assert await store.record_turn("s1", "u1", "more", "Sure", "remote")
    assert await store.record_turn("s2", None, "other", "Reply", "minimal-fallback")

    rows = await store.recent("s1")
    assert [r["message"] for r in rows] == ["more", "hello"]
    assert rows[1]["opportunity_ids"] == ["a", "b"]
    assert rows[0]["opportunity_ids"] == []
    assert rows[0]["source"] == "remote"


async def test_recent_limit(store: ChatLogStore) -> None:
    for i in range(5):
        await store.record_turn("s1", None, f"m{i}", "r", "remote")

    rows = await store.recent("s1", limit=2)
    assert [r["message"] for r in rows] == ["m4", "m3"]


async def test_write_failure_returns_false(store: ChatLogStore) -> None:
    with patch("coach.db._open", side_effect=RuntimeError("disk full")):
        ok = await store.record_turn("s1", None, "hello", "hi", "remote")
    assert ok is False


def test_singleton() -> None:
    ChatLogStore._reset()
    assert ChatLogStore.get() is ChatLogStore.get()
    ChatLogStore._reset()
