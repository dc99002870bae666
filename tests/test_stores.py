"""Tests for the opportunity and profile stores."""

import json
from pathlib import Path

import pytest

from coach.opportunities.models import OpportunityRecord, UserProfilePreferences
from coach.opportunities.profiles import InMemoryProfileStore, SqlProfileStore
from coach.opportunities.store import InMemoryOpportunityStore, SqlOpportunityStore
from coach.retrieval.context import ContextAssembler

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
async def opportunity_store(tmp_path: Path) -> SqlOpportunityStore:
    return SqlOpportunityStore(db_path=tmp_path / "test.db")


@pytest.fixture
async def profile_store(tmp_path: Path) -> SqlProfileStore:
    return SqlProfileStore(db_path=tmp_path / "test.db")


# -- In-memory ----------------------------------------------------------------


async def test_in_memory_returns_newest_first() -> None:
    store = InMemoryOpportunityStore()
    store.add(OpportunityRecord(id="old"))
    store.add(OpportunityRecord(id="new"))

    records = await store.query_recent(10)
    assert [r.id for r in records] == ["new", "old"]


async def test_in_memory_respects_limit() -> None:
    store = InMemoryOpportunityStore([OpportunityRecord(id=str(i)) for i in range(10)])
    assert len(await store.query_recent(3)) == 3


async def test_in_memory_empty() -> None:
    assert await InMemoryOpportunityStore().query_recent(50) == []


async def test_in_memory_profile_lookup() -> None:
    store = InMemoryProfileStore({"u1": UserProfilePreferences(interests=["art"])})
    assert (await store.get_profile("u1")).interests == ["art"]
    assert await store.get_profile("missing") is None


# -- SQL opportunities ---------------------------------------------------------


async def test_sql_upsert_and_query(opportunity_store: SqlOpportunityStore) -> None:
    await opportunity_store.upsert(
        "a", {"title": "First", "organization": "Org A"}, created_at="2026-01-01T00:00:00+00:00"
    )
    await opportunity_store.upsert(
        "b", {"title": "Second", "tags": ["stem"]}, created_at="2026-02-01T00:00:00+00:00"
    )

    records = await opportunity_store.query_recent(50)
    assert [r.id for r in records] == ["b", "a"]
    assert records[0].tags == ["stem"]
    assert records[1].provider == "Org A"


async def test_sql_query_limit(opportunity_store: SqlOpportunityStore) -> None:
    for i in range(5):
        await opportunity_store.upsert(f"id{i}", {"title": f"T{i}"}, created_at=f"2026-01-0{i + 1}")

    records = await opportunity_store.query_recent(2)
    assert [r.id for r in records] == ["id4", "id3"]


async def test_sql_upsert_replaces(opportunity_store: SqlOpportunityStore) -> None:
    await opportunity_store.upsert("a", {"title": "Old"})
    await opportunity_store.upsert("a", {"title": "New"})

    records = await opportunity_store.query_recent(50)
    assert len(records) == 1
    assert records[0].title == "New"


async def test_sql_empty_table(opportunity_store: SqlOpportunityStore) -> None:
    assert await opportunity_store.query_recent(50) == []


# -- SQL profiles --------------------------------------------------------------


async def test_sql_profile_round_trip(profile_store: SqlProfileStore) -> None:
    await profile_store.save(
        "u1", {"name": "Ada", "preferences": {"careerInterests": ["robotics"]}}
    )

    profile = await profile_store.get_profile("u1")
    assert profile is not None
    assert profile.name == "Ada"
    assert profile.interests == ["robotics"]


async def test_sql_profile_missing(profile_store: SqlProfileStore) -> None:
    assert await profile_store.get_profile("nobody") is None


def test_singletons_reset() -> None:
    SqlOpportunityStore._reset()
    SqlProfileStore._reset()
    assert SqlOpportunityStore.get() is SqlOpportunityStore.get()
    assert SqlProfileStore.get() is SqlProfileStore.get()
    SqlOpportunityStore._reset()
    SqlProfileStore._reset()


# -- Unreadable rows -------------------------------------------------------------


async def _insert_raw(store: SqlOpportunityStore, doc_id: str, document: str) -> None:
    await store._db.write(
        "INSERT INTO opportunities (id, document, created_at) VALUES (?, ?, ?)",
        (doc_id, document, "2026-01-01T00:00:00+00:00"),
    )


async def test_sql_skips_rows_that_cannot_be_normalized(
    opportunity_store: SqlOpportunityStore,
) -> None:
    await opportunity_store.upsert(
        "good", {"title": "Computer Science Scholarship"}, created_at="2026-02-01"
    )
    await _insert_raw(opportunity_store, "not-a-dict", json.dumps(["a", "list"]))
    await _insert_raw(opportunity_store, "broken-json", "{oops")

    records = await opportunity_store.query_recent(50)
    assert [r.id for r in records] == ["good"]


async def test_sql_reads_millisecond_deadline_and_scalar_tags(
    opportunity_store: SqlOpportunityStore,
) -> None:
    await _insert_raw(
        opportunity_store,
        "odd",
        json.dumps({"title": "Odd", "deadline": 1735689600000, "tags": 5}),
    )

    [record] = await opportunity_store.query_recent(50)
    assert record.deadline == "2025-01-01T00:00:00+00:00"
    assert record.tags == []


async def test_bad_row_keeps_retrieval_working(opportunity_store: SqlOpportunityStore) -> None:
    await opportunity_store.upsert(
        "good", {"title": "Computer Science Scholarship"}, created_at="2026-02-01"
    )
    await _insert_raw(opportunity_store, "bad", json.dumps(42))
    assembler = ContextAssembler(opportunity_store, InMemoryProfileStore())

    context = await assembler.build("computer science scholarship", "u1")

    assert [item.record.id for item in context.candidates] == ["good"]


async def test_upsert_rejects_unreadable_document_before_writing(
    opportunity_store: SqlOpportunityStore,
) -> None:
    with pytest.raises(TypeError):
        await opportunity_store.upsert("bad", ["not", "a", "dict"])  # type: ignore[arg-type]

    assert await opportunity_store.query_recent(50) == []
