"""Conversation session: ordered history pinned to a system message."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from coach.chat.prompt import persona
from coach.config import settings

if TYPE_CHECKING:
    from coach.retrieval.context import RetrievalContext

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Message:
    """A single conversation turn."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=_now)
    attached_context: RetrievalContext | None = None

    def to_payload(self) -> dict[str, str]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


def system_message() -> Message:
    return Message(role="system", content=persona())


@dataclass
class ConversationSession:
    """History and remote identity for one chat.

    ``history[0]`` is always the system message and the history never holds
    more than ``cap`` entries. One session belongs to one UI conversation and
    must not serve two turns at once.
    """

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    remote_conversation_id: str | None = None
    cap: int = field(default_factory=lambda: settings.history_cap)
    history: list[Message] = field(default_factory=lambda: [system_message()])
    retry_count: int = 0

    def __post_init__(self) -> None:
        if self.cap < 2:
            raise ValueError("history cap must leave room for the system message and a turn")
        if not self.history or self.history[0].role != "system":
            self.history.insert(0, system_message())

    def _append(self, message: Message) -> Message:
        self.history.append(message)
        if len(self.history) > self.cap:
            dropped = len(self.history) - self.cap
            self.history = [self.history[0], *self.history[-(self.cap - 1):]]
            logger.debug("Session %s: evicted %d oldest message(s)", self.session_id, dropped)
        return message

    def append_user(self, text: str) -> Message:
        return self._append(Message(role="user", content=text))

    def append_assistant(self, text: str, context: RetrievalContext | None = None) -> Message:
        return self._append(Message(role="assistant", content=text, attached_context=context))

    def get_recent_turns(self, n: int, max_chars: int | None = None) -> list[Message]:
        """Last *n* non-system messages, content truncated for the remote payload."""
        if n <= 0:
            return []
        limit = max_chars if max_chars is not None else settings.turn_content_limit
        turns = [m for m in self.history if m.role != "system"][-n:]
        return [replace(m, content=m.content[:limit]) for m in turns]

    def remember_conversation_id(self, conversation_id: str | None) -> None:
        """Keep the id the remote service assigned; a missing id keeps the old one."""
        if conversation_id:
            self.remote_conversation_id = conversation_id

    def reset(self) -> int:
        """Drop every turn and the remote id. Returns how many turns were cleared."""
        cleared = len(self.history) - 1
        self.history = [system_message()]
        self.remote_conversation_id = None
        self.retry_count = 0
        return cleared


def new_session() -> ConversationSession:
    """Create a fresh session; the caller owns its lifecycle."""
    return ConversationSession()
