# materials_registry/registry/index.py
"""
Materials Registry: Index Manager

The ledger cannot enumerate its keys, so every known record id is kept
in one JSON array under a single well-known key ("material_keys").

    list_ids()        -> ids in append order (never raises on bad data)
    append_id(id)     -> idempotent read-merge-write

append_id is a read-modify-write on shared state with no locking from
the ledger. Two concurrent appenders can read the same base list and the
later write drops the earlier id (last write wins on the whole list).
With max_attempts > 1 the manager re-reads after writing and re-merges
if its own id was clobbered, up to the bound.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional, Sequence

from ..errors import IndexCorrupt, StoreUnavailable, WriteFailure
from ..ledger import LedgerClient, LedgerReadError, LedgerWriteError


logger = logging.getLogger("materials-registry.index")

INDEX_KEY = "material_keys"

MergeFn = Callable[[Sequence[str], str], List[str]]


def append_merge(current: Sequence[str], record_id: str) -> List[str]:
    """Default merge: keep existing order, append id if absent."""
    merged = list(current)
    if record_id not in merged:
        merged.append(record_id)
    return merged


def parse_index(raw: bytes) -> List[str]:
    """
    Decode an index blob.

    Duplicate entries collapse to their first occurrence.

    Raises:
        ValueError: If blob is not a JSON array of strings
    """
    try:
        ids = json.loads(bytes(raw).decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError(str(e)) from e
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise ValueError("index is not a JSON array of strings")
    return list(dict.fromkeys(ids))


def serialize_index(ids: Sequence[str]) -> bytes:
    return json.dumps(list(ids), separators=(",", ":")).encode("utf-8")


class IndexManager:
    """Owner of the index key."""

    def __init__(
        self,
        ledger: LedgerClient,
        key: str = INDEX_KEY,
        merge: Optional[MergeFn] = None,
        max_attempts: int = 1,
    ):
        """
        Args:
            ledger: Ledger client
            key: Index key
            merge: (current ids, new id) -> ids to write
            max_attempts: Write/verify rounds per append (1 = no verification)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._ledger = ledger
        self._key = key
        self._merge = merge or append_merge
        self._max_attempts = max_attempts

    @property
    def key(self) -> str:
        return self._key

    async def _read_raw(self) -> bytes:
        try:
            return await self._ledger.get(self._key)
        except LedgerReadError as e:
            raise StoreUnavailable(f"Index read failed: {e.reason}") from e

    async def list_ids(self) -> List[str]:
        """
        Return all indexed ids in append order.

        Undecodable index data yields [] and a warning.

        Raises:
            StoreUnavailable: If the ledger cannot be read at all
        """
        raw = await self._read_raw()
        if not raw:
            return []
        try:
            return parse_index(raw)
        except ValueError as e:
            logger.warning("Ignoring undecodable index under %s: %s", self._key, e)
            return []

    async def append_id(self, record_id: str) -> bool:
        """
        Append record_id if not already indexed.

        Returns:
            True if the index was written, False if id was already present

        Raises:
            IndexCorrupt: Existing index blob is undecodable
            WriteFailure: Ledger write failed
            StoreUnavailable: Ledger read failed before the id was written
        """
        wrote = False
        for attempt in range(1, self._max_attempts + 1):
            current = await self._reread_ids(record_id, wrote)
            if current is None or record_id in current:
                return wrote

            merged = self._merge(current, record_id)
            try:
                await self._ledger.set(self._key, serialize_index(merged))
            except LedgerWriteError as e:
                raise WriteFailure(
                    f"Index append failed: {e.reason}", record_id, rejected=e.rejected
                ) from e
            wrote = True

            if self._max_attempts == 1:
                return True
            logger.debug("Index append %s attempt %d written", record_id, attempt)

        current = await self._reread_ids(record_id, wrote)
        if current is not None and record_id not in current:
            raise WriteFailure(
                f"Index append lost to concurrent writers after "
                f"{self._max_attempts} attempts",
                record_id,
            )
        return wrote

    async def _reread_ids(self, record_id: str, wrote: bool) -> Optional[List[str]]:
        # After a confirmed write an unreadable index is not an append failure;
        # None stops verification and the append stands.
        try:
            return await self._current_ids(record_id)
        except StoreUnavailable as e:
            if not wrote:
                raise
            logger.warning("Could not verify index append of %s: %s", record_id, e)
            return None

    async def _current_ids(self, record_id: str) -> List[str]:
        raw = await self._read_raw()
        if not raw:
            return []
        try:
            return parse_index(raw)
        except ValueError as e:
            raise IndexCorrupt(
                f"Refusing to overwrite undecodable index: {e}", record_id
            ) from e
