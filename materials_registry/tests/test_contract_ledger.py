# materials_registry/tests/test_contract_ledger.py
"""
ContractLedgerClient against a stand-in contract.

No node is contacted: the web3 contract object and the eth namespace are
replaced with fakes exposing the same call shapes.
"""

from __future__ import annotations

import asyncio
from typing import Dict

import pytest
from eth_account import Account

from ..ledger import ContractLedgerClient, LedgerReadError, LedgerWriteError
from ..ledger.contract import CONTRACT_ABI


CONTRACT = "0x" + "c0ffee" * 6 + "c0ff"
PRIVATE_KEY = "0x" + "11" * 32


def run(coro):
    return asyncio.run(coro)


async def _value(v):
    return v


# =============================================================================
# Fakes
# =============================================================================

class FakeCall:
    def __init__(self, result=None, error=None, tx=None):
        self._result = result
        self._error = error
        self._tx = tx

    async def call(self):
        if self._error:
            raise self._error
        return self._result

    async def build_transaction(self, params):
        if self._error:
            raise self._error
        tx = dict(params)
        tx.update(self._tx)
        return tx


class FakeFunctions:
    def __init__(self, data: Dict[str, bytes], available=True, error=None):
        self.data = data
        self.available = available
        self.error = error
        self.set_calls = []

    def isAvailable(self):
        return FakeCall(self.available, self.error)

    def getData(self, key):
        return FakeCall(self.data.get(key, b""), self.error)

    def setData(self, key, value):
        self.set_calls.append((key, value))
        return FakeCall(error=self.error, tx={"to": CONTRACT_CHECKSUM, "data": "0x", "value": 0})


class FakeContract:
    def __init__(self, functions):
        self.functions = functions


class FakeEth:
    def __init__(self, status=1, send_error=None):
        self.status = status
        self.send_error = send_error
        self.sent = []

    async def get_transaction_count(self, address):
        return 7

    @property
    def gas_price(self):
        return _value(10 ** 9)

    async def send_raw_transaction(self, raw):
        if self.send_error:
            raise self.send_error
        self.sent.append(raw)
        return b"\x12" * 32

    async def wait_for_transaction_receipt(self, tx_hash):
        return {"status": self.status}


class FakeW3:
    def __init__(self, eth):
        self.eth = eth


CONTRACT_CHECKSUM = ContractLedgerClient(CONTRACT, "http://127.0.0.1:8545").contract_address


def make_client(functions, private_key=None, eth=None):
    client = ContractLedgerClient(
        CONTRACT, "http://127.0.0.1:8545", private_key=private_key, chain_id=1337,
    )
    client._contract = FakeContract(functions)
    if eth is not None:
        client._w3 = FakeW3(eth)
    return client


# =============================================================================
# Construction
# =============================================================================

def test_abi_exposes_key_value_functions():
    names = {entry.get("name") for entry in CONTRACT_ABI}
    assert {"isAvailable", "getData", "setData"} <= names


def test_read_only_without_private_key():
    client = ContractLedgerClient(CONTRACT, "http://127.0.0.1:8545")
    assert client.account_address is None
    assert not client.can_write
    assert client.contract_address.lower() == CONTRACT.lower()


def test_account_from_private_key():
    client = ContractLedgerClient(CONTRACT, "http://127.0.0.1:8545", private_key=PRIVATE_KEY)
    assert client.account_address == Account.from_key(PRIVATE_KEY).address
    assert client.can_write


# =============================================================================
# Reads
# =============================================================================

def test_get_returns_stored_bytes():
    client = make_client(FakeFunctions({"material_keys": b'["a"]'}))
    assert run(client.get("material_keys")) == b'["a"]'
    assert run(client.get("unset")) == b""


def test_get_error_raises_read_error():
    client = make_client(FakeFunctions({}, error=RuntimeError("node down")))
    with pytest.raises(LedgerReadError) as exc:
        run(client.get("material_keys"))
    assert exc.value.key == "material_keys"
    assert "node down" in exc.value.reason


def test_is_available():
    assert run(make_client(FakeFunctions({})).is_available()) is True
    assert run(make_client(FakeFunctions({}, available=False)).is_available()) is False


def test_is_available_never_raises():
    client = make_client(FakeFunctions({}, error=RuntimeError("node down")))
    assert run(client.is_available()) is False


# =============================================================================
# Writes
# =============================================================================

def test_set_without_key_is_rejected():
    functions = FakeFunctions({})
    client = make_client(functions)
    with pytest.raises(LedgerWriteError) as exc:
        run(client.set("material_keys", b"[]"))
    assert exc.value.rejected
    assert functions.set_calls == []


def test_set_signs_and_sends():
    functions = FakeFunctions({})
    eth = FakeEth()
    client = make_client(functions, private_key=PRIVATE_KEY, eth=eth)

    tx_hash = run(client.set("material_x", b"{}"))

    assert tx_hash == "0x" + "12" * 32
    assert functions.set_calls == [("material_x", b"{}")]
    assert len(eth.sent) == 1


def test_set_failed_receipt():
    client = make_client(FakeFunctions({}), private_key=PRIVATE_KEY, eth=FakeEth(status=0))
    with pytest.raises(LedgerWriteError) as exc:
        run(client.set("material_x", b"{}"))
    assert not exc.value.rejected
    assert "Transaction failed" in exc.value.reason


def test_set_user_rejection_flagged():
    eth = FakeEth(send_error=RuntimeError("User rejected transaction"))
    client = make_client(FakeFunctions({}), private_key=PRIVATE_KEY, eth=eth)
    with pytest.raises(LedgerWriteError) as exc:
        run(client.set("material_x", b"{}"))
    assert exc.value.rejected
