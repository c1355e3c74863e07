# materials_registry/registry/store.py
"""
Materials Registry: Registry Store

Keyed access to individual records stored under `material_{id}`.
An empty value means the record is absent; an undecodable value is also
reported as absent (with a warning) so one bad record never breaks a caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import DecodeError, StoreUnavailable, WriteFailure
from ..ledger import LedgerClient, LedgerReadError, LedgerWriteError
from .codec import MaterialRecord, decode_record, encode_record


logger = logging.getLogger("materials-registry.store")

RECORD_KEY_PREFIX = "material_"


def record_key(record_id: str) -> str:
    """Ledger key for a record id."""
    return f"{RECORD_KEY_PREFIX}{record_id}"


class RegistryStore:
    """Record reads and writes through the ledger."""

    def __init__(self, ledger: LedgerClient):
        self._ledger = ledger

    @property
    def ledger(self) -> LedgerClient:
        return self._ledger

    async def get(self, record_id: str) -> Optional[MaterialRecord]:
        """
        Fetch and decode one record.

        Returns:
            MaterialRecord, or None if unset or undecodable

        Raises:
            StoreUnavailable: If the ledger read fails
        """
        key = record_key(record_id)
        try:
            raw = await self._ledger.get(key)
        except LedgerReadError as e:
            raise StoreUnavailable(f"Read of {key} failed: {e.reason}", record_id) from e

        if not raw:
            return None
        try:
            return decode_record(record_id, raw)
        except DecodeError as e:
            logger.warning("Skipping undecodable material %s: %s", record_id, e)
            return None

    async def put(self, record: MaterialRecord) -> str:
        """
        Encode and write one record.

        Returns:
            Ledger acknowledgement

        Raises:
            WriteFailure: If the ledger write fails
        """
        key = record_key(record.id)
        try:
            return await self._ledger.set(key, encode_record(record))
        except LedgerWriteError as e:
            raise WriteFailure(
                f"Write of {key} failed: {e.reason}", record.id, rejected=e.rejected
            ) from e
