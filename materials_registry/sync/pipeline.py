# materials_registry/sync/pipeline.py
"""
Materials Registry Sync: Submission Pipeline

Two-step, non-atomic registration of a new material:

    WRITING_PAYLOAD   store.put(record)      failure -> nothing indexed
    UPDATING_INDEX    index.append_id(id)    failure -> orphan record
    DONE              synchronizer.sync()

An orphan record (saved but not indexed) is reported as
PartialIndexFailure; retry_index(id) repeats only the index step.

Usage:
    pipeline = SubmissionPipeline(store, index, synchronizer)
    result = await pipeline.submit(
        MaterialSubmission("perovskite", "bandgap=1.6eV", "MIT"),
        owner="0x...",
    )
    if result.needs_index_retry:
        result = await pipeline.retry_index(result.record_id)
"""

from __future__ import annotations

import base64
import json
import logging
import secrets
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..errors import (
    NotFound,
    PartialIndexFailure,
    RegistryError,
    StoreUnavailable,
    WriteFailure,
)
from ..registry import IndexManager, MaterialRecord, MaterialStatus, RegistryStore
from .synchronizer import Projection, RegistrySynchronizer


logger = logging.getLogger("materials-registry.submit")

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 7


# =============================================================================
# Types
# =============================================================================

class SubmissionStage(str, Enum):
    """Observable submission stages."""
    WRITING_PAYLOAD = "writing payload"
    UPDATING_INDEX = "updating index"
    DONE = "done"
    FAILED = "failed"


ProgressCallback = Callable[[SubmissionStage], None]


@dataclass(frozen=True)
class MaterialSubmission:
    """Caller-supplied fields of a new material."""
    material_type: str
    properties: str
    research_institution: str = ""

    def validate(self) -> None:
        if not self.material_type or not self.material_type.strip():
            raise ValueError("materialType is required")
        if not self.properties or not self.properties.strip():
            raise ValueError("properties is required")

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "MaterialSubmission":
        """Build from a form-style mapping (camelCase or snake_case keys)."""
        def pick(camel: str, snake: str) -> str:
            value = fields.get(camel, fields.get(snake, ""))
            return "" if value is None else str(value)

        return cls(
            material_type=pick("materialType", "material_type"),
            properties=pick("properties", "properties"),
            research_institution=pick("researchInstitution", "research_institution"),
        )


@dataclass
class SubmissionResult:
    """Outcome of submit() / retry_index()."""
    record_id: str
    stage: SubmissionStage
    record: Optional[MaterialRecord] = None
    error: Optional[RegistryError] = None
    projection: Optional[Projection] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def needs_index_retry(self) -> bool:
        """Record is saved but unreachable through the index."""
        return isinstance(self.error, PartialIndexFailure)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


# =============================================================================
# Helpers
# =============================================================================

def placeholder_seal(submission: MaterialSubmission) -> str:
    """
    Stand-in payload: "FHE-" + base64 of the submitted fields as JSON.

    Real encryption happens outside the registry; pass a different
    `seal` to the pipeline to plug it in.
    """
    fields = {
        "materialType": submission.material_type,
        "properties": submission.properties,
        "researchInstitution": submission.research_institution,
    }
    blob = json.dumps(fields, separators=(",", ":")).encode("utf-8")
    return "FHE-" + base64.b64encode(blob).decode("ascii")


def generate_record_id(clock: Callable[[], float] = time.time) -> str:
    """Epoch millis plus a random base-36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"{int(clock() * 1000)}-{suffix}"


# =============================================================================
# SubmissionPipeline
# =============================================================================

class SubmissionPipeline:
    """Writes new records, then indexes them, then re-syncs."""

    def __init__(
        self,
        store: RegistryStore,
        index: IndexManager,
        synchronizer: RegistrySynchronizer,
        seal: Callable[[MaterialSubmission], str] = placeholder_seal,
        clock: Callable[[], float] = time.time,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self._index = index
        self._synchronizer = synchronizer
        self._seal = seal
        self._clock = clock
        self._id_factory = id_factory or (lambda: generate_record_id(self._clock))

    async def submit(
        self,
        submission: MaterialSubmission,
        owner: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SubmissionResult:
        """
        Register a new material owned by `owner`.

        Raises:
            ValueError: Missing fields or owner identity
        """
        submission.validate()
        if not owner:
            raise ValueError("owner identity is required")

        record = MaterialRecord(
            id=self._id_factory(),
            payload=self._seal(submission),
            timestamp=int(self._clock()),
            owner=owner,
            material_type=submission.material_type,
            properties=submission.properties,
            research_institution=submission.research_institution,
            status=MaterialStatus.PENDING,
        )

        if not self._store.ledger.can_write:
            error = WriteFailure("No write capability", record.id, rejected=True)
            return self._fail(record.id, error, on_progress)

        self._report(on_progress, SubmissionStage.WRITING_PAYLOAD)
        try:
            await self._store.put(record)
        except WriteFailure as e:
            logger.error("Submission of %s failed: %s", record.id, e)
            return self._fail(record.id, e, on_progress)

        logger.info("Material %s written, updating index", record.id)
        return await self._index_and_sync(record.id, record, on_progress)

    async def retry_index(
        self,
        record_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SubmissionResult:
        """Repeat only the index step for an already-written record."""
        try:
            record = await self._store.get(record_id)
        except StoreUnavailable as e:
            return self._fail(record_id, e, on_progress)
        if record is None:
            return self._fail(record_id, NotFound(record_id), on_progress)

        return await self._index_and_sync(record_id, record, on_progress)

    async def _index_and_sync(
        self,
        record_id: str,
        record: MaterialRecord,
        on_progress: Optional[ProgressCallback],
    ) -> SubmissionResult:
        self._report(on_progress, SubmissionStage.UPDATING_INDEX)
        try:
            await self._index.append_id(record_id)
        except (WriteFailure, StoreUnavailable) as e:
            logger.error("Material %s saved but not indexed: %s", record_id, e)
            error = PartialIndexFailure(record_id, cause=e)
            result = self._fail(record_id, error, on_progress)
            result.record = record
            return result

        projection = None
        try:
            projection = await self._synchronizer.sync()
        except StoreUnavailable as e:
            logger.warning("Material %s indexed; refresh failed: %s", record_id, e)

        self._report(on_progress, SubmissionStage.DONE)
        return SubmissionResult(
            record_id=record_id,
            stage=SubmissionStage.DONE,
            record=record,
            projection=projection,
        )

    def _fail(
        self,
        record_id: str,
        error: RegistryError,
        on_progress: Optional[ProgressCallback],
    ) -> SubmissionResult:
        self._report(on_progress, SubmissionStage.FAILED)
        return SubmissionResult(record_id=record_id, stage=SubmissionStage.FAILED, error=error)

    @staticmethod
    def _report(on_progress: Optional[ProgressCallback], stage: SubmissionStage) -> None:
        if on_progress is not None:
            on_progress(stage)
