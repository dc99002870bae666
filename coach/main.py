"""Coach engine entry point: a terminal chat against the configured stores."""

import argparse
import asyncio
import logging

from coach.chat.log_store import ChatLogStore
from coach.chat.pipeline import ResponsePipeline
from coach.chat.session import ConversationSession
from coach.config import settings
from coach.opportunities.profiles import SqlProfileStore
from coach.opportunities.store import SqlOpportunityStore
from coach.retrieval.context import ContextAssembler

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


def create_pipeline() -> ResponsePipeline:
    """Wire the SQL-backed stores and configured remote backends together."""
    assembler = ContextAssembler(SqlOpportunityStore.get(), SqlProfileStore.get())
    chat_log = ChatLogStore.get() if settings.chat_log_enabled else None
    return ResponsePipeline(assembler, chat_log=chat_log)


async def chat(user_id: str | None, user_name: str | None) -> None:
    pipeline = create_pipeline()
    session = ConversationSession()
    logger.info(
        "Session %s started (remote backends: %s)",
        session.session_id,
        ", ".join(settings.get_remote_backends()) or "none",
    )
    print("Type a message. Commands: /reset, /status, /quit")

    while True:
        try:
            text = (await asyncio.to_thread(input, "> ")).strip()
        except EOFError:
            break
        if not text:
            continue
        if text == "/quit":
            break
        if text == "/reset":
            cleared = session.reset()
            print(f"Cleared {cleared} message(s).")
            continue
        if text == "/status":
            print(pipeline.status(session))
            continue

        envelope = await pipeline.respond(session, text, user_id, user_name=user_name)
        print(f"\n{envelope.content}\n")
        for action in envelope.actions:
            print(f"  [{action.kind}] {action.label}")
        print(f"  (source: {envelope.source})\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the opportunity coach")
    parser.add_argument("--user", "-u", help="User id whose profile personalizes answers")
    parser.add_argument("--name", help="Display name used in local replies")
    args = parser.parse_args()

    try:
        asyncio.run(chat(args.user, args.name))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
