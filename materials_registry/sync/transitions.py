# materials_registry/sync/transitions.py
"""
Materials Registry Sync: Status Transition Engine

    pending -> verified
    pending -> rejected

The ledger has no access control, so ownership is checked here before
every write. Terminal states are final; re-submission needs a new id.
The projection is only refreshed by a sync after a confirmed write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import (
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    RegistryError,
    StoreUnavailable,
    Unauthorized,
    WriteFailure,
)
from ..registry import MaterialRecord, MaterialStatus, RegistryStore
from .synchronizer import Projection, RegistrySynchronizer


logger = logging.getLogger("materials-registry.transition")

TERMINAL_TARGETS = (MaterialStatus.VERIFIED, MaterialStatus.REJECTED)


class TransitionStage(str, Enum):
    LOADING = "loading record"
    WRITING_STATUS = "writing status"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TransitionResult:
    """Outcome of a status transition."""
    record_id: str
    target: MaterialStatus
    record: Optional[MaterialRecord] = None
    error: Optional[RegistryError] = None
    projection: Optional[Projection] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def is_owner(record: MaterialRecord, caller: Optional[str]) -> bool:
    """Case-insensitive identity comparison."""
    if not caller:
        return False
    return record.owner.lower() == caller.lower()


def check_transition(
    record: MaterialRecord,
    caller: Optional[str],
    target: MaterialStatus,
) -> None:
    """
    Authorization and state predicate evaluated before any write.

    Raises:
        Unauthorized: caller is not the owner
        InvalidTransition: record is not pending
    """
    if not is_owner(record, caller):
        raise Unauthorized(record.id, caller or "")
    if record.status is not MaterialStatus.PENDING:
        raise InvalidTransition(record.id, record.status.value, target.value)


class StatusTransitionEngine:
    """Ownership-gated status changes."""

    def __init__(self, store: RegistryStore, synchronizer: RegistrySynchronizer):
        self._store = store
        self._synchronizer = synchronizer

    async def transition(
        self,
        record_id: str,
        caller: Optional[str],
        target: Union[MaterialStatus, str],
        on_progress: Optional[Callable[[TransitionStage], None]] = None,
    ) -> TransitionResult:
        """
        Move a pending record to verified or rejected.

        Raises:
            ValueError: target is not a terminal status
        """
        target = MaterialStatus(target)
        if target not in TERMINAL_TARGETS:
            raise ValueError(f"Transition target must be verified or rejected, got {target.value}")

        def report(stage: TransitionStage) -> None:
            if on_progress is not None:
                on_progress(stage)

        def fail(error: RegistryError) -> TransitionResult:
            logger.warning("Transition of %s to %s failed: %s", record_id, target.value, error)
            report(TransitionStage.FAILED)
            return TransitionResult(record_id, target, error=error)

        report(TransitionStage.LOADING)
        try:
            record = await self._store.get(record_id)
        except StoreUnavailable as e:
            return fail(e)
        if record is None:
            return fail(NotFound(record_id))

        try:
            check_transition(record, caller, target)
        except (Unauthorized, InvalidTransition) as e:
            return fail(e)

        updated = record.with_status(target)
        report(TransitionStage.WRITING_STATUS)
        try:
            await self._store.put(updated)
        except WriteFailure as e:
            return fail(PersistenceFailure(str(e), record_id, rejected=e.rejected))

        logger.info("Material %s -> %s", record_id, target.value)
        projection = None
        try:
            projection = await self._synchronizer.sync()
        except StoreUnavailable as e:
            logger.warning("Material %s updated; refresh failed: %s", record_id, e)

        report(TransitionStage.DONE)
        return TransitionResult(record_id, target, record=updated, projection=projection)
