"""Tests for ConversationSession."""

import pytest

from coach.chat.session import ConversationSession, Message, new_session


def test_new_session_starts_with_system_message() -> None:
    session = new_session()
    assert len(session.history) == 1
    assert session.history[0].role == "system"
    assert session.remote_conversation_id is None
    assert session.retry_count == 0


def test_sessions_get_distinct_ids() -> None:
    assert new_session().session_id != new_session().session_id


def test_append_user_and_assistant() -> None:
    session = ConversationSession()
    session.append_user("hello")
    session.append_assistant("hi there")

    assert [(m.role, m.content) for m in session.history[1:]] == [
        ("user", "hello"),
        ("assistant", "hi there"),
    ]


def test_cap_keeps_system_message() -> None:
    session = ConversationSession(cap=5)
    for i in range(10):
        session.append_user(f"msg {i}")

    assert len(session.history) == 5
    assert session.history[0].role == "system"
    assert [m.content for m in session.history[1:]] == ["msg 6", "msg 7", "msg 8", "msg 9"]


def test_default_cap_is_21() -> None:
    session = ConversationSession()
    for i in range(30):
        session.append_user(f"msg {i}")
    assert len(session.history) == 21
    assert session.history[0].role == "system"


def test_cap_too_small() -> None:
    with pytest.raises(ValueError):
        ConversationSession(cap=1)


def test_missing_system_message_is_inserted() -> None:
    session = ConversationSession(history=[Message(role="user", content="hi")])
    assert session.history[0].role == "system"
    assert session.history[1].content == "hi"


def test_recent_turns_excludes_system_and_truncates() -> None:
    session = ConversationSession()
    session.append_user("a" * 600)
    session.append_assistant("short")

    turns = session.get_recent_turns(8)
    assert [m.role for m in turns] == ["user", "assistant"]
    assert len(turns[0].content) == 500
    # history itself is untouched
    assert len(session.history[1].content) == 600


def test_recent_turns_limit() -> None:
    session = ConversationSession()
    for i in range(6):
        session.append_user(f"msg {i}")

    assert [m.content for m in session.get_recent_turns(2)] == ["msg 4", "msg 5"]
    assert session.get_recent_turns(0) == []
    assert session.get_recent_turns(2, max_chars=3)[0].content == "msg"


def test_remember_conversation_id() -> None:
    session = ConversationSession()
    session.remember_conversation_id("conv-1")
    session.remember_conversation_id(None)
    assert session.remote_conversation_id == "conv-1"


def test_reset() -> None:
    session = ConversationSession()
    session.append_user("hello")
    session.append_assistant("hi")
    session.remember_conversation_id("conv-1")
    session.retry_count = 2

    assert session.reset() == 2
    assert len(session.history) == 1
    assert session.history[0].role == "system"
    assert session.remote_conversation_id is None
    assert session.retry_count == 0


def test_message_payload() -> None:
    payload = Message(role="user", content="hi").to_payload()
    assert payload["role"] == "user"
    assert payload["content"] == "hi"
    assert "timestamp" in payload
