# materials_registry/tests/test_store.py
"""Registry store: keyed record access under material_{id}."""

from __future__ import annotations

import asyncio
import logging

import pytest

from ..errors import StoreUnavailable, WriteFailure
from ..ledger import MockLedgerClient
from ..registry import MaterialRecord, RegistryStore, encode_record, record_key


def run(coro):
    return asyncio.run(coro)


RECORD = MaterialRecord(
    id="r1",
    payload="FHE-abc",
    timestamp=100,
    owner="0xowner",
    material_type="alloy",
    properties="hardness=9",
    research_institution="KAIST",
)


def test_record_key():
    assert record_key("r1") == "material_r1"


def test_put_then_get():
    ledger = MockLedgerClient()
    store = RegistryStore(ledger)

    async def scenario():
        ack = await store.put(RECORD)
        return ack, await store.get("r1")

    ack, fetched = run(scenario())
    assert ack.startswith("0x")
    assert fetched == RECORD
    assert ledger.raw("material_r1") == encode_record(RECORD)


def test_absent_record_is_none():
    assert run(RegistryStore(MockLedgerClient()).get("missing")) is None


def test_undecodable_record_is_none_with_warning(caplog):
    ledger = MockLedgerClient()
    ledger.put_raw("material_bad", b'{"owner": "0x1"}')
    with caplog.at_level(logging.WARNING, logger="materials-registry.store"):
        assert run(RegistryStore(ledger).get("bad")) is None
    assert "bad" in caplog.text


def test_read_failure_raises():
    ledger = MockLedgerClient()
    ledger.fail_reads("material_r1")
    with pytest.raises(StoreUnavailable) as exc:
        run(RegistryStore(ledger).get("r1"))
    assert exc.value.record_id == "r1"


def test_write_failure_raises():
    ledger = MockLedgerClient()
    ledger.fail_writes("material_r1", rejected=True)
    with pytest.raises(WriteFailure) as exc:
        run(RegistryStore(ledger).put(RECORD))
    assert exc.value.rejected
    assert ledger.raw("material_r1") == b""


def test_read_only_ledger_cannot_write():
    ledger = MockLedgerClient(address=None)
    assert not ledger.can_write
    with pytest.raises(WriteFailure):
        run(RegistryStore(ledger).put(RECORD))
