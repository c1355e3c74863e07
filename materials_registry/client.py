# materials_registry/client.py
"""
Materials Registry: Client Facade

Wires ledger, index, store, synchronizer, pipelines and statistics
together behind the four calls presentation code needs:

    projection = await client.sync()
    result     = await client.submit({"materialType": ..., "properties": ...})
    result     = await client.transition(record_id, "verified")
    stats      = client.aggregate()

The caller identity is the ledger's signing address.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping, Optional, Union

from .config import RegistryConfig, configure_logging
from .ledger import ContractLedgerClient, LedgerClient
from .registry import IndexManager, MaterialRecord, MaterialStatus, RegistryStore
from .sync import (
    MaterialSubmission,
    Projection,
    RegistryStats,
    RegistrySynchronizer,
    StatusTransitionEngine,
    SubmissionPipeline,
    SubmissionResult,
    TransitionResult,
    aggregate,
    is_owner,
    placeholder_seal,
)
from .sync.synchronizer import DEFAULT_MAX_CONCURRENCY


class MaterialsRegistryClient:
    """High-level registry client bound to one ledger and one caller."""

    def __init__(
        self,
        ledger: LedgerClient,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        index_append_attempts: int = 1,
        seal: Callable[[MaterialSubmission], str] = placeholder_seal,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            ledger: Ledger client (its account is the caller identity)
            max_concurrency: Parallel record fetches per sync
            index_append_attempts: Write/verify rounds per index append
            seal: Turns submitted fields into the opaque payload
            clock: Time source for timestamps and ids
        """
        self.ledger = ledger
        self.index = IndexManager(ledger, max_attempts=index_append_attempts)
        self.store = RegistryStore(ledger)
        self.synchronizer = RegistrySynchronizer(
            ledger, self.index, self.store,
            max_concurrency=max_concurrency,
            clock=clock,
        )
        self.pipeline = SubmissionPipeline(
            self.store, self.index, self.synchronizer, seal=seal, clock=clock,
        )
        self.transitions = StatusTransitionEngine(self.store, self.synchronizer)

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "MaterialsRegistryClient":
        """
        Build a contract-backed client from RegistryConfig.

        Also applies config.log_level via configure_logging().
        """
        configure_logging(config.log_level)
        ledger = ContractLedgerClient(
            contract_address=config.contract_address,
            rpc_url=config.rpc_url,
            private_key=config.private_key,
            chain_id=config.chain_id,
            gas_limit=config.gas_limit,
        )
        return cls(
            ledger,
            max_concurrency=config.max_concurrency,
            index_append_attempts=config.index_append_attempts,
        )

    @property
    def caller(self) -> Optional[str]:
        return self.ledger.account_address

    @property
    def projection(self) -> Projection:
        return self.synchronizer.projection

    def is_owner(self, record: MaterialRecord) -> bool:
        """Whether the current caller may verify/reject this record."""
        return is_owner(record, self.caller)

    async def sync(self) -> Projection:
        return await self.synchronizer.sync()

    async def submit(
        self,
        fields: Union[MaterialSubmission, Mapping[str, Any]],
        on_progress=None,
    ) -> SubmissionResult:
        if not isinstance(fields, MaterialSubmission):
            fields = MaterialSubmission.from_fields(fields)
        return await self.pipeline.submit(fields, owner=self.caller, on_progress=on_progress)

    async def retry_index(self, record_id: str, on_progress=None) -> SubmissionResult:
        return await self.pipeline.retry_index(record_id, on_progress=on_progress)

    async def transition(
        self,
        record_id: str,
        target: Union[MaterialStatus, str],
        on_progress=None,
    ) -> TransitionResult:
        return await self.transitions.transition(
            record_id, self.caller, target, on_progress=on_progress
        )

    async def verify(self, record_id: str) -> TransitionResult:
        return await self.transition(record_id, MaterialStatus.VERIFIED)

    async def reject(self, record_id: str) -> TransitionResult:
        return await self.transition(record_id, MaterialStatus.REJECTED)

    def aggregate(self, projection: Optional[Projection] = None) -> RegistryStats:
        return aggregate(projection if projection is not None else self.projection)
