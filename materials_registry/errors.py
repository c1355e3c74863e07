# materials_registry/errors.py
"""
Materials Registry: Error Taxonomy

Every error raised (or reported) by the registry core derives from
RegistryError and carries a stable `kind` string that presentation
collaborators can switch on without parsing messages.

    StoreUnavailable     fatal to the current sync pass, retry later
    DecodeError          one record is malformed, skipped
    NotFound             no record under that id
    Unauthorized         caller does not own the record
    InvalidTransition    record is not pending
    WriteFailure         ledger `set` failed (network / signer)
    PersistenceFailure   status write-back failed
    IndexCorrupt         index blob exists but is undecodable
    PartialIndexFailure  record saved, index append failed

Updated: 2026-10-19
Version: 0.1.0
"""

from __future__ import annotations

from typing import Optional


class RegistryError(Exception):
    """Base registry error."""
    kind = "registry_error"

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class StoreUnavailable(RegistryError):
    """Ledger reports itself unavailable or cannot be reached."""
    kind = "store_unavailable"


class DecodeError(RegistryError):
    """Bytes do not decode to a complete Material Record."""
    kind = "decode_error"


class NotFound(RegistryError):
    """Record not found in the ledger."""
    kind = "not_found"

    def __init__(self, record_id: str):
        super().__init__(f"Material not found: {record_id}", record_id)


class Unauthorized(RegistryError):
    """Caller is not the record owner."""
    kind = "unauthorized"

    def __init__(self, record_id: str, caller: str):
        self.caller = caller
        super().__init__(
            f"Not material owner: {record_id}, caller: {caller}", record_id
        )


class InvalidTransition(RegistryError):
    """Requested status change is not allowed from the current status."""
    kind = "invalid_transition"

    def __init__(self, record_id: str, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move {record_id} from {current} to {target}", record_id
        )


class WriteFailure(RegistryError):
    """Ledger write failed."""
    kind = "write_failure"

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        rejected: bool = False,
    ):
        super().__init__(message, record_id)
        self.rejected = rejected


class PersistenceFailure(WriteFailure):
    """Status transition could not be written back."""
    kind = "persistence_failure"


class IndexCorrupt(WriteFailure):
    """Index blob is present but undecodable; refusing to overwrite it."""
    kind = "index_corrupt"


class PartialIndexFailure(RegistryError):
    """Record persisted but its id could not be appended to the index."""
    kind = "partial_index_failure"

    def __init__(self, record_id: str, cause: Optional[BaseException] = None):
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Record {record_id} saved but not indexed - retry indexing{detail}",
            record_id,
        )
