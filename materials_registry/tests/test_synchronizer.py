# materials_registry/tests/test_synchronizer.py
"""
Registry synchronizer: full-registry load into a Projection.

Covers ordering, skip-don't-crash handling of bad records, availability
gating, bounded fan-out and stale-pass protection.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import List

import pytest

from ..errors import StoreUnavailable
from ..ledger import MockLedgerClient
from ..registry import (
    INDEX_KEY,
    IndexManager,
    MaterialRecord,
    MaterialStatus,
    RegistryStore,
    encode_record,
    record_key,
)
from ..sync import EMPTY_PROJECTION, RegistrySynchronizer


def run(coro):
    return asyncio.run(coro)


def seed(ledger: MockLedgerClient, records: List[MaterialRecord], index_ids=None) -> None:
    """Write records and index directly into the mock ledger."""
    for record in records:
        ledger.put_raw(record_key(record.id), encode_record(record))
    ids = index_ids if index_ids is not None else [r.id for r in records]
    ledger.put_raw(INDEX_KEY, ("[" + ",".join(f'"{i}"' for i in ids) + "]").encode())


def material(record_id: str, timestamp: int, **overrides) -> MaterialRecord:
    fields = dict(
        id=record_id,
        payload="FHE-" + record_id,
        timestamp=timestamp,
        owner="0xowner",
        material_type="ceramic",
        properties="p",
        research_institution="Caltech",
    )
    fields.update(overrides)
    return MaterialRecord(**fields)


def make_synchronizer(ledger, **kwargs) -> RegistrySynchronizer:
    return RegistrySynchronizer(
        ledger, IndexManager(ledger), RegistryStore(ledger), **kwargs
    )


# =============================================================================
# Basic passes
# =============================================================================

def test_empty_ledger_yields_empty_projection():
    sync = make_synchronizer(MockLedgerClient())
    projection = run(sync.sync())
    assert len(projection) == 0
    assert projection.skipped == ()
    assert sync.projection is projection


def test_sorted_newest_first():
    ledger = MockLedgerClient()
    seed(ledger, [material("a", 100), material("b", 300), material("c", 200)])
    projection = run(make_synchronizer(ledger).sync())
    assert [r.timestamp for r in projection] == [300, 200, 100]
    assert projection.ids == ["b", "c", "a"]


def test_equal_timestamps_keep_index_order():
    ledger = MockLedgerClient()
    seed(ledger, [material("x", 50), material("y", 70), material("z", 50)])
    projection = run(make_synchronizer(ledger).sync())
    assert projection.ids == ["y", "x", "z"]


def test_malformed_record_skipped(caplog):
    ledger = MockLedgerClient()
    records = [material("a", 1), material("b", 2), material("c", 3)]
    seed(ledger, records)
    ledger.put_raw(record_key("b"), b"\x00not-json")

    with caplog.at_level(logging.WARNING):
        projection = run(make_synchronizer(ledger).sync())

    assert projection.ids == ["c", "a"]
    assert projection.skipped == ("b",)
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1


def test_indexed_id_without_body_skipped():
    ledger = MockLedgerClient()
    seed(ledger, [material("a", 1)], index_ids=["a", "ghost"])
    projection = run(make_synchronizer(ledger).sync())
    assert projection.ids == ["a"]
    assert projection.skipped == ("ghost",)


def test_record_read_failure_skipped():
    ledger = MockLedgerClient()
    seed(ledger, [material("a", 1), material("b", 2)])
    ledger.fail_reads(record_key("a"))
    projection = run(make_synchronizer(ledger).sync())
    assert projection.ids == ["b"]


def test_orphan_record_not_visible():
    ledger = MockLedgerClient()
    seed(ledger, [material("a", 1), material("orphan", 2)], index_ids=["a"])
    assert run(make_synchronizer(ledger).sync()).ids == ["a"]


# =============================================================================
# Availability
# =============================================================================

def test_unavailable_ledger_aborts_pass_and_keeps_projection():
    ledger = MockLedgerClient()
    seed(ledger, [material("a", 1)])
    sync = make_synchronizer(ledger)
    first = run(sync.sync())

    ledger.available = False
    seed(ledger, [material("a", 1), material("b", 2)])
    reads_before = len(ledger.reads)
    with pytest.raises(StoreUnavailable) as exc:
        run(sync.sync())
    assert exc.value.kind == "store_unavailable"
    assert sync.projection is first
    assert len(ledger.reads) == reads_before


def test_initial_projection_is_empty():
    assert make_synchronizer(MockLedgerClient()).projection is EMPTY_PROJECTION


# =============================================================================
# Concurrency
# =============================================================================

class CountingLedger(MockLedgerClient):
    """Tracks how many record reads are in flight at once."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.in_flight = 0
        self.peak = 0

    async def get(self, key: str) -> bytes:
        if key == INDEX_KEY:
            return await super().get(key)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            return await super().get(key)
        finally:
            self.in_flight -= 1


def test_fetch_fan_out_is_bounded():
    ledger = CountingLedger(latency=0.005)
    seed(ledger, [material(f"m{i}", i) for i in range(7)])
    projection = run(make_synchronizer(ledger, max_concurrency=3).sync())
    assert len(projection) == 7
    assert ledger.peak == 3


def test_max_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        make_synchronizer(MockLedgerClient(), max_concurrency=0)


class SlowFirstProbeLedger(MockLedgerClient):
    """First availability probe is slow, later ones are instant."""

    def __init__(self):
        super().__init__()
        self._probes = 0

    async def is_available(self) -> bool:
        self._probes += 1
        if self._probes == 1:
            await asyncio.sleep(0.05)
        return True


def test_stale_pass_does_not_replace_newer_projection():
    ledger = SlowFirstProbeLedger()
    seed(ledger, [material("a", 1)])
    clock = itertools.count(1)
    sync = make_synchronizer(ledger, clock=lambda: next(clock))

    async def scenario():
        return await asyncio.gather(sync.sync(), sync.sync())

    older, newer = run(scenario())
    assert newer.synced_at == 1
    assert older is newer
    assert sync.projection is newer


# =============================================================================
# Projection helpers
# =============================================================================

def test_projection_search_and_get():
    ledger = MockLedgerClient()
    seed(ledger, [
        material("a", 1, material_type="Perovskite", research_institution="MIT"),
        material("b", 2, material_type="graphene", research_institution="Oxford",
                 status=MaterialStatus.VERIFIED),
        material("c", 3, material_type="alloy", research_institution="mit lab",
                 status=MaterialStatus.REJECTED),
    ])
    projection = run(make_synchronizer(ledger).sync())

    assert [r.id for r in projection.search("mit")] == ["c", "a"]
    assert [r.id for r in projection.search("PEROV")] == ["a"]
    assert [r.id for r in projection.search("", "verified")] == ["b"]
    assert [r.id for r in projection.search("mit", MaterialStatus.REJECTED)] == ["c"]
    assert len(projection.search("", "all")) == 3
    assert projection.search("", "archived") == []
    assert projection.get("b").material_type == "graphene"
    assert projection.get("zzz") is None
