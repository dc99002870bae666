"""Conversation sessions, response generation and follow-up actions."""

from coach.chat.actions import Action, derive_actions
from coach.chat.pipeline import ResponseEnvelope, ResponsePipeline, SessionStatus
from coach.chat.session import ConversationSession, Message, new_session

__all__ = [
    "Action",
    "ConversationSession",
    "Message",
    "ResponseEnvelope",
    "ResponsePipeline",
    "SessionStatus",
    "derive_actions",
    "new_session",
]
