"""Remote generation backends.

Each backend takes a ``RemoteRequest`` and returns a ``RemoteReply`` or
raises ``RemoteGenerationError``. The pipeline tries backends in order and
treats the turn as a remote failure only when all of them fail.

- ``HttpChatBackend`` posts to the chat cloud function.
- ``AnthropicChatBackend`` calls Claude directly with the retrieval context
  folded into the system prompt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import anthropic
import httpx

from coach.chat.prompt import build_system_prompt
from coach.config import settings

if TYPE_CHECKING:
    from coach.chat.session import Message
    from coach.retrieval.context import RetrievalContext

logger = logging.getLogger(__name__)


class RemoteGenerationError(Exception):
    """The remote service could not produce a usable reply."""


@dataclass
class RemoteRequest:
    message: str
    retrieval: RetrievalContext
    conversation_id: str | None = None
    recent_turns: list[Message] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self.message,
            "context": {
                "recentTurns": [m.to_payload() for m in self.recent_turns],
                "retrieval": self.retrieval.to_payload(),
            },
        }
        if self.conversation_id:
            payload["conversationId"] = self.conversation_id
        return payload


@dataclass
class RemoteReply:
    content: str
    conversation_id: str | None = None


class RemoteBackend(Protocol):
    name: str

    async def generate(self, request: RemoteRequest) -> RemoteReply: ...


def parse_reply(body: Any) -> RemoteReply:
    """Validate a ``{success, response, conversationId}`` body."""
    if not isinstance(body, dict):
        raise RemoteGenerationError(f"Malformed reply: expected an object, got {type(body).__name__}")
    if body.get("success") is not True:
        raise RemoteGenerationError(f"Remote reported failure: {body.get('error', 'no detail')}")
    content = body.get("response")
    if not isinstance(content, str) or not content.strip():
        raise RemoteGenerationError("Malformed reply: missing response text")
    conversation_id = body.get("conversationId")
    if conversation_id is not None and not isinstance(conversation_id, str):
        conversation_id = str(conversation_id)
    return RemoteReply(content=content, conversation_id=conversation_id)


class HttpChatBackend:
    """Chat cloud function reached over HTTPS."""

    name = "http"

    def __init__(self, url: str | None = None, token: str | None = None) -> None:
        self._url = url if url is not None else settings.chat_endpoint_url
        self._token = token if token is not None else settings.chat_endpoint_token

    async def generate(self, request: RemoteRequest) -> RemoteReply:
        if not self._url:
            raise RemoteGenerationError("CHAT_ENDPOINT_URL is not configured.")

        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            async with httpx.AsyncClient(timeout=settings.remote_timeout_seconds) as client:
                resp = await client.post(self._url, json=request.to_payload(), headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteGenerationError(f"Chat endpoint unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise RemoteGenerationError(
                f"Chat endpoint returned HTTP {resp.status_code}: {resp.text[:200]}"
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise RemoteGenerationError("Chat endpoint returned invalid JSON") from exc
        return parse_reply(body)


_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def to_api_messages(turns: list[Message], message: str) -> list[dict[str, str]]:
    """Convert recent turns plus the new message to alternating user/assistant turns."""
    result: list[dict[str, str]] = []
    for turn in turns:
        if turn.role == "system":
            continue
        if not result and turn.role != "user":
            continue
        if result and result[-1]["role"] == turn.role:
            result[-1]["content"] += "\n\n" + turn.content
        else:
            result.append({"role": turn.role, "content": turn.content})

    if not result or result[-1]["role"] != "user":
        result.append({"role": "user", "content": message})
    elif result[-1]["content"] != message and not result[-1]["content"].endswith(message):
        result[-1]["content"] += "\n\n" + message
    return result


class AnthropicChatBackend:
    """Direct Claude call used when the cloud function is down."""

    name = "anthropic"

    def __init__(self, model: str | None = None, max_tokens: int | None = None) -> None:
        self._model = model or settings.chat_model
        self._max_tokens = max_tokens or settings.chat_max_tokens

    async def generate(self, request: RemoteRequest) -> RemoteReply:
        if not settings.anthropic_api_key:
            raise RemoteGenerationError("ANTHROPIC_API_KEY is not configured.")

        try:
            response = await _get_client().messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=build_system_prompt(request.retrieval),
                messages=to_api_messages(request.recent_turns, request.message),
            )
        except anthropic.APIError as exc:
            raise RemoteGenerationError(f"Anthropic API error: {exc}") from exc

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text.strip():
            raise RemoteGenerationError("Anthropic returned an empty reply")
        return RemoteReply(content=text, conversation_id=request.conversation_id)


def default_backends() -> list[RemoteBackend]:
    """Backends enabled by settings, in call order."""
    available: dict[str, type] = {"http": HttpChatBackend, "anthropic": AnthropicChatBackend}
    return [available[name]() for name in settings.get_remote_backends()]
