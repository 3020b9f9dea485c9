import pytest

from codecheck.shared.core import events
from codecheck.shared.core.cancellation import CancellationToken
from codecheck.shared.core.errors import LoadError, OperationCancelled
from codecheck.shared.domain.analysis.engine import FixedSimilarityEngine
from codecheck.shared.domain.records.models import Record
from codecheck.shared.domain.records.store import RecordStore


def make_records(count):
    return [Record(id=f"check-{i}", name=f"Project {i}") for i in range(count)]


@pytest.mark.asyncio
async def test_load_with_no_records_yields_empty_store(ledger):
    store = RecordStore(ledger)

    records = await store.load()

    assert records == []
    assert len(store) == 0


@pytest.mark.asyncio
async def test_load_attaches_estimates_to_unverified_records_only(ledger):
    ledger.seed("a", "Alpha", "first")
    ledger.seed("b", "Beta", "second", verified=True, clear_value=91)
    store = RecordStore(ledger, analysis=FixedSimilarityEngine(40))

    await store.load()

    alpha, beta = store.get("a"), store.get("b")
    assert alpha.estimated_value == 40
    assert alpha.is_estimate
    assert alpha.display_value == 40
    assert beta.estimated_value is None
    assert beta.clear_value == 91
    assert beta.display_value == 91


@pytest.mark.asyncio
async def test_unreadable_records_are_skipped(ledger):
    ledger.seed("a", "Alpha")
    ledger.seed("b", "Beta")
    ledger.seed("c", "Gamma")
    ledger.unreadable.add("b")
    store = RecordStore(ledger)

    records = await store.load()

    assert [r.id for r in records] == ["a", "c"]
    assert len(store.last_errors) == 1
    assert store.last_errors[0].record_id == "b"


@pytest.mark.asyncio
async def test_listing_failure_raises_and_keeps_cache(ledger):
    ledger.seed("a", "Alpha")
    store = RecordStore(ledger)
    await store.load()

    ledger.list_error = RuntimeError("rpc down")
    with pytest.raises(LoadError, match="Failed to load data"):
        await store.load()

    assert [r.id for r in store.records] == ["a"]


@pytest.mark.asyncio
async def test_cancelled_load_does_not_replace_cache(ledger):
    store = RecordStore(ledger)
    ledger.seed("a", "Alpha")
    token = CancellationToken()
    token.cancel("wallet disconnected")

    with pytest.raises(OperationCancelled):
        await store.load(token)

    assert len(store) == 0


@pytest.mark.asyncio
async def test_load_publishes_counts(ledger, event_bus):
    received = []

    async def on_loaded(payload):
        received.append(payload)

    await event_bus.subscribe(events.TOPIC_RECORDS_LOADED, on_loaded)
    ledger.seed("a", "Alpha")
    ledger.seed("b", "Beta")
    ledger.unreadable.add("b")

    await RecordStore(ledger, event_bus).load()
    await event_bus.wait_until_idle()

    assert received == [{"count": 1, "skipped": 1}]


@pytest.mark.asyncio
async def test_filter_matches_name_or_description_case_insensitively(ledger):
    ledger.seed("a", "Token Bridge", "cross-chain")
    ledger.seed("b", "Vault", "ERC-4626 bridge adapter")
    ledger.seed("c", "Oracle", "price feeds")
    store = RecordStore(ledger)
    await store.load()

    assert [r.id for r in store.filter("BRIDGE")] == ["a", "b"]
    assert [r.id for r in store.filter("")] == ["a", "b", "c"]
    assert store.filter("nothing like it") == []


def test_paginate_clamps_page_into_range():
    records = make_records(12)

    first = RecordStore.paginate(records, 5, 0)
    last = RecordStore.paginate(records, 5, 99)

    assert first.page == 1
    assert first.total_pages == 3
    assert [r.id for r in first.items] == [f"check-{i}" for i in range(5)]
    assert not first.has_previous
    assert first.has_next

    assert last.page == 3
    assert [r.id for r in last.items] == ["check-10", "check-11"]
    assert last.has_previous
    assert not last.has_next


def test_paginate_empty_sequence_has_one_page():
    page = RecordStore.paginate([], 5, 3)

    assert page.page == 1
    assert page.total_pages == 1
    assert page.items == []


def test_paginate_rejects_non_positive_page_size():
    with pytest.raises(ValueError):
        RecordStore.paginate(make_records(3), 0, 1)


@pytest.mark.asyncio
async def test_stats_use_display_values(ledger):
    ledger.seed("a", "Alpha", verified=True, clear_value=90)
    ledger.seed("b", "Beta", verified=True, clear_value=10)
    ledger.seed("c", "Gamma")
    store = RecordStore(ledger, analysis=FixedSimilarityEngine(80))
    await store.load()

    stats = store.stats(high_threshold=70)

    assert stats.total == 3
    assert stats.verified == 2
    assert stats.average_value == pytest.approx(60.0)
    assert stats.high_value_count == 2


def test_stats_of_empty_store(ledger):
    stats = RecordStore(ledger).stats()

    assert stats.total == 0
    assert stats.average_value == 0.0


@pytest.mark.asyncio
async def test_patch_verified_replaces_single_record(ledger):
    ledger.seed("a", "Alpha")
    ledger.seed("b", "Beta")
    store = RecordStore(ledger, analysis=FixedSimilarityEngine(12))
    await store.load()

    patched = store.patch_verified("b", 42)

    assert patched.verified
    assert patched.clear_value == 42
    assert patched.estimated_value is None
    assert store.get("a").estimated_value == 12
    assert store.patch_verified("missing", 1) is None
