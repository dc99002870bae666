#!/usr/bin/env python3
"""Load opportunity and profile documents from JSON into the local database.

Usage:
    python scripts/seed_opportunities.py opportunities.json
    python scripts/seed_opportunities.py opportunities.json --profiles profiles.json

``opportunities.json`` is a list of documents, each with an ``id`` key.
``profiles.json`` maps user ids to profile documents.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from coach.opportunities.profiles import SqlProfileStore
from coach.opportunities.store import SqlOpportunityStore


async def seed(opportunities_path: Path, profiles_path: Path | None) -> None:
    documents = json.loads(opportunities_path.read_text(encoding="utf-8"))
    store = SqlOpportunityStore.get()
    loaded = 0
    for doc in documents:
        doc_id = str(doc.pop("id", "")) or None
        if doc_id is None:
            print(f"Skipping document without id: {doc.get('title', '?')}", file=sys.stderr)
            continue
        await store.upsert(doc_id, doc)
        loaded += 1
    print(f"Loaded {loaded} opportunity document(s)")

    if profiles_path:
        profiles = json.loads(profiles_path.read_text(encoding="utf-8"))
        profile_store = SqlProfileStore.get()
        for user_id, doc in profiles.items():
            await profile_store.save(user_id, doc)
        print(f"Loaded {len(profiles)} profile(s)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the coach database from JSON files")
    parser.add_argument("opportunities", type=Path, help="JSON list of opportunity documents")
    parser.add_argument("--profiles", type=Path, help="JSON object of user id -> profile")
    args = parser.parse_args()
    asyncio.run(seed(args.opportunities, args.profiles))


if __name__ == "__main__":
    main()
