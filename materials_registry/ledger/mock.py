# materials_registry/ledger/mock.py
"""
Materials Registry Ledger: In-Memory Ledger (for testing without blockchain)

Behaves like the contract ledger: get() returns b"" for unset keys, set()
overwrites. Failures and latency can be injected per key so the partial
write and lost-update paths can be exercised deterministically.

Usage:
    ledger = MockLedgerClient(address="0x" + "A" * 40)
    ledger.fail_writes("material_keys")     # next set() on the index fails
    ledger.available = False                # next sync pass aborts
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple

from .base import LedgerClient, LedgerReadError, LedgerWriteError


DEFAULT_MOCK_ADDRESS = "0x" + "1" * 40


class MockLedgerClient(LedgerClient):
    """
    In-memory LedgerClient.

    No blockchain required - stores values in a dict.
    """

    def __init__(
        self,
        address: Optional[str] = DEFAULT_MOCK_ADDRESS,
        latency: float = 0.0,
    ):
        """
        Args:
            address: Current signer address (None = read-only)
            latency: Seconds each get/set awaits before completing
        """
        self._data: Dict[str, bytes] = {}
        self._current_address = address
        self._latency = latency
        self._read_failures: Dict[str, int] = {}
        self._write_failures: Dict[str, Tuple[int, bool]] = {}
        self._tx_counter = 0

        self.available = True
        self.writes: List[Tuple[str, bytes]] = []
        self.reads: List[str] = []

    @property
    def account_address(self) -> Optional[str]:
        return self._current_address

    def set_account(self, address: Optional[str]) -> None:
        """Set current account address."""
        self._current_address = address

    # =========================================================================
    # Failure injection / direct access
    # =========================================================================

    def fail_reads(self, key: str, times: int = 1) -> None:
        """Make the next `times` get() calls on key raise."""
        self._read_failures[key] = times

    def fail_writes(self, key: str, times: int = 1, rejected: bool = False) -> None:
        """Make the next `times` set() calls on key raise."""
        self._write_failures[key] = (times, rejected)

    def put_raw(self, key: str, value: bytes) -> None:
        """Store bytes directly, bypassing the write path."""
        self._data[key] = value

    def raw(self, key: str) -> bytes:
        """Read bytes directly, bypassing the read path."""
        return self._data.get(key, b"")

    # =========================================================================
    # LedgerClient
    # =========================================================================

    async def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> bytes:
        self.reads.append(key)
        if self._latency:
            await asyncio.sleep(self._latency)

        remaining = self._read_failures.get(key, 0)
        if remaining:
            self._read_failures[key] = remaining - 1
            raise LedgerReadError(key, "injected read failure")
        return self._data.get(key, b"")

    async def set(self, key: str, value: bytes) -> str:
        if self._current_address is None:
            raise LedgerWriteError(
                key, "Private key required for write operations", rejected=True
            )
        if self._latency:
            await asyncio.sleep(self._latency)

        remaining, rejected = self._write_failures.get(key, (0, False))
        if remaining:
            self._write_failures[key] = (remaining - 1, rejected)
            reason = "user rejected transaction" if rejected else "injected write failure"
            raise LedgerWriteError(key, reason, rejected=rejected)

        self._data[key] = bytes(value)
        self.writes.append((key, bytes(value)))
        self._tx_counter += 1
        return "0x" + format(self._tx_counter, "064x")  # Mock tx hash
