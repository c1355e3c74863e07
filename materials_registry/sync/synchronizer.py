# materials_registry/sync/synchronizer.py
"""
Materials Registry Sync: Registry Synchronizer

Single read path for the whole registry:

    1. ledger.is_available()            (abort pass if False)
    2. index.list_ids()
    3. store.get(id) for every id       (bounded concurrent fan-out)
    4. stable sort by timestamp, newest first
    5. publish Projection               (atomic swap)

Missing, unreadable and undecodable records are skipped; the pass still
publishes. Nothing is published until every fetch has settled.

Usage:
    synchronizer = RegistrySynchronizer(ledger, index, store)
    projection = await synchronizer.sync()
    for record in projection:
        print(record.id, record.status.value)
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..errors import StoreUnavailable
from ..ledger import LedgerClient
from ..registry import IndexManager, MaterialRecord, MaterialStatus, RegistryStore


logger = logging.getLogger("materials-registry.sync")

DEFAULT_MAX_CONCURRENCY = 8


# =============================================================================
# Projection
# =============================================================================

@dataclass(frozen=True)
class Projection:
    """
    Point-in-time view of the registry, newest first.

    Attributes:
        records: Loaded records sorted by timestamp descending
        synced_at: Time the pass that built it finished
        skipped: Indexed ids that could not be loaded in that pass
    """
    records: Tuple[MaterialRecord, ...] = ()
    synced_at: float = 0.0
    skipped: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[MaterialRecord]:
        return iter(self.records)

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.records]

    def get(self, record_id: str) -> Optional[MaterialRecord]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def search(
        self,
        query: str = "",
        status: Optional[Union[MaterialStatus, str]] = None,
    ) -> List[MaterialRecord]:
        """
        Filter by case-insensitive substring over material type and
        institution, and optionally by status ("all"/None = any).
        An unrecognized status matches nothing.
        """
        needle = query.lower()
        wanted = None
        if status is not None and status != "all":
            try:
                wanted = MaterialStatus(status)
            except ValueError:
                return []

        return [
            r for r in self.records
            if (needle in r.material_type.lower()
                or needle in r.research_institution.lower())
            and (wanted is None or r.status is wanted)
        ]


EMPTY_PROJECTION = Projection()


# =============================================================================
# RegistrySynchronizer
# =============================================================================

class RegistrySynchronizer:
    """Builds and publishes Projections from the index and store."""

    def __init__(
        self,
        ledger: LedgerClient,
        index: IndexManager,
        store: RegistryStore,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            ledger: Ledger client (availability probe)
            index: Index manager
            store: Registry store
            max_concurrency: Max record fetches in flight
            clock: Time source for synced_at
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._ledger = ledger
        self._index = index
        self._store = store
        self._max_concurrency = max_concurrency
        self._clock = clock

        self._projection = EMPTY_PROJECTION
        self._generation = 0
        self._published_generation = 0

    @property
    def projection(self) -> Projection:
        """Last published projection."""
        return self._projection

    async def sync(self) -> Projection:
        """
        Run one synchronization pass.

        Returns:
            The published Projection. If a newer pass already published,
            this pass is discarded and the newer projection is returned.

        Raises:
            StoreUnavailable: Ledger unavailable or index unreadable
        """
        self._generation += 1
        generation = self._generation

        if not await self._ledger.is_available():
            logger.error("Ledger is not available; sync pass aborted")
            raise StoreUnavailable("Ledger is not available")

        ids = await self._index.list_ids()
        fetched = await self._fetch_all(ids)

        records = [r for r in fetched if r is not None]
        skipped = tuple(i for i, r in zip(ids, fetched) if r is None)
        # list.sort is stable, so equal timestamps keep index order
        records.sort(key=lambda r: r.timestamp, reverse=True)

        projection = Projection(
            records=tuple(records),
            synced_at=self._clock(),
            skipped=skipped,
        )

        if generation > self._published_generation:
            self._projection = projection
            self._published_generation = generation
            logger.info("Synced %d materials (%d skipped)", len(records), len(skipped))
        else:
            logger.debug("Discarding stale sync pass %d", generation)

        return self._projection

    async def _fetch_all(self, ids: List[str]) -> List[Optional[MaterialRecord]]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch(record_id: str) -> Optional[MaterialRecord]:
            async with semaphore:
                try:
                    record = await self._store.get(record_id)
                except StoreUnavailable as e:
                    logger.warning("Error loading material %s: %s", record_id, e)
                    return None
            if record is None:
                logger.debug("Indexed material %s has no readable body", record_id)
            return record

        return list(await asyncio.gather(*(fetch(i) for i in ids)))
