"""Tiered response generation: remote, then enriched local, then minimal.

``ResponsePipeline.respond()`` always returns a ``ResponseEnvelope`` with
non-empty content. Failures only show up in the envelope's ``source``.

The remote tier is guarded by a per-session circuit breaker: every turn on
which all remote backends fail bumps ``session.retry_count``; once it
reaches ``max_retries`` later turns go straight to local generation until a
remote success resets it. All backends of a turn share one
``remote_timeout_seconds`` budget. There is no retry loop or sleep inside a
turn.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from coach.chat.actions import Action, derive_actions
from coach.chat.remote import RemoteGenerationError, RemoteRequest, default_backends
from coach.chat.templates import MINIMAL_REPLY, LocalReply, generate_local
from coach.config import settings
from coach.retrieval.context import RetrievalContext

if TYPE_CHECKING:
    from coach.chat.log_store import ChatLogStore
    from coach.chat.remote import RemoteBackend, RemoteReply
    from coach.chat.session import ConversationSession, Message
    from coach.retrieval.context import ContextAssembler

logger = logging.getLogger(__name__)

Source = Literal["remote", "enriched-local", "minimal-fallback"]
LocalGenerator = Callable[[str, RetrievalContext, "str | None"], LocalReply]


@dataclass
class ResponseEnvelope:
    content: str
    actions: list[Action] = field(default_factory=list)
    source: Source = "enriched-local"
    context: RetrievalContext | None = None

    def to_dict(self) -> dict[str, Any]:
        """Shape handed to the UI layer."""
        return {
            "content": self.content,
            "actions": [action.to_dict() for action in self.actions],
            "source": self.source,
        }


@dataclass
class SessionStatus:
    connected: bool
    retry_count: int
    has_context: bool
    message_count: int


class ResponsePipeline:
    """Runs one conversation turn end to end."""

    def __init__(
        self,
        assembler: ContextAssembler,
        backends: list[RemoteBackend] | None = None,
        *,
        max_retries: int | None = None,
        timeout_seconds: float | None = None,
        recent_turns_limit: int | None = None,
        chat_log: ChatLogStore | None = None,
        local_generator: LocalGenerator = generate_local,
    ) -> None:
        self._assembler = assembler
        self._backends = default_backends() if backends is None else list(backends)
        self._max_retries = settings.max_retries if max_retries is None else max_retries
        self._timeout = timeout_seconds or settings.remote_timeout_seconds
        self._recent_turns_limit = recent_turns_limit or settings.recent_turns_limit
        self._chat_log = chat_log
        self._local_generator = local_generator

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def respond(
        self,
        session: ConversationSession,
        text: str,
        user_id: str | None = None,
        *,
        user_name: str | None = None,
    ) -> ResponseEnvelope:
        """Answer *text* for *session*. Never raises."""
        recent = session.get_recent_turns(self._recent_turns_limit)
        session.append_user(text)

        context = await self._build_context(text, user_id, recent)

        envelope = await self._attempt_remote(session, text, context, recent)
        if envelope is None:
            envelope = self._generate_local(text, context, user_name)

        session.append_assistant(envelope.content, envelope.context)
        logger.info(
            "Session %s answered from %s (%d action(s))",
            session.session_id,
            envelope.source,
            len(envelope.actions),
        )
        await self._log_turn(session, user_id, text, envelope)
        return envelope

    def status(self, session: ConversationSession) -> SessionStatus:
        return SessionStatus(
            connected=session.retry_count < self._max_retries,
            retry_count=session.retry_count,
            has_context=len(session.history) > 1,
            message_count=len(session.history) - 1,
        )

    # -- Tiers -----------------------------------------------------------------

    async def _build_context(
        self, text: str, user_id: str | None, recent: list[Message]
    ) -> RetrievalContext:
        try:
            return await self._assembler.build(text, user_id, recent_turns=recent)
        except Exception:
            logger.exception("Context assembly failed; continuing without context")
            return RetrievalContext(recent_turns=list(recent))

    async def _attempt_remote(
        self,
        session: ConversationSession,
        text: str,
        context: RetrievalContext,
        recent: list[Message],
    ) -> ResponseEnvelope | None:
        if not self._backends:
            return None
        if session.retry_count >= self._max_retries:
            logger.info(
                "Remote circuit open for session %s (%d consecutive failures)",
                session.session_id,
                session.retry_count,
            )
            return None

        request = RemoteRequest(
            message=text,
            retrieval=context,
            conversation_id=session.remote_conversation_id,
            recent_turns=recent,
        )
        reply = None
        try:
            async with asyncio.timeout(self._timeout):
                reply = await self._first_reply(request)
        except TimeoutError:
            logger.warning("Remote backends timed out after %.1fs", self._timeout)

        if reply is not None:
            session.retry_count = 0
            session.remember_conversation_id(reply.conversation_id)
            return ResponseEnvelope(
                content=reply.content,
                actions=derive_actions(text, reply.content, context),
                source="remote",
                context=context,
            )

        session.retry_count += 1
        logger.warning(
            "All remote backends failed for session %s (failure %d of %d)",
            session.session_id,
            session.retry_count,
            self._max_retries,
        )
        return None

    async def _first_reply(self, request: RemoteRequest) -> RemoteReply | None:
        """Try each backend in order; None when every one of them failed."""
        for backend in self._backends:
            try:
                return await backend.generate(request)
            except RemoteGenerationError as exc:
                logger.warning("Remote backend %s failed: %s", backend.name, exc)
            except Exception:
                logger.exception("Remote backend %s raised unexpectedly", backend.name)
        return None

    def _generate_local(
        self, text: str, context: RetrievalContext, user_name: str | None
    ) -> ResponseEnvelope:
        try:
            reply = self._local_generator(text, context, user_name)
            if not reply.content.strip():
                raise ValueError("local generator produced an empty reply")
            actions = reply.actions or derive_actions(text, reply.content, context)
            return ResponseEnvelope(
                content=reply.content,
                actions=actions,
                source="enriched-local",
                context=context,
            )
        except Exception:
            logger.exception("Local generation failed; using minimal fallback")
            return ResponseEnvelope(
                content=MINIMAL_REPLY.content,
                actions=list(MINIMAL_REPLY.actions),
                source="minimal-fallback",
            )

    async def _log_turn(
        self,
        session: ConversationSession,
        user_id: str | None,
        text: str,
        envelope: ResponseEnvelope,
    ) -> None:
        if self._chat_log is None:
            return
        ids = [item.record.id for item in envelope.context.candidates] if envelope.context else []
        await self._chat_log.record_turn(
            session.session_id, user_id, text, envelope.content, envelope.source, ids
        )
