# materials_registry/__init__.py
"""
Materials Registry: Encrypted Material Records on a Key-Value Ledger

Research institutions register material records carrying an opaque
(already encrypted) payload and move them through a verification
workflow: pending -> verified / rejected, gated by record ownership.

Submodules:
    ledger/    - Key-value ledger clients
                 - ContractLedgerClient: getData/setData contract via web3.py
                 - MockLedgerClient: in-memory ledger
    registry/  - Storage layout
                 - Record codec ("material_{id}" JSON objects)
                 - IndexManager: id catalog under "material_keys"
                 - RegistryStore: keyed record access
    sync/      - Workflow
                 - RegistrySynchronizer: full load -> Projection
                 - SubmissionPipeline: write record, then index
                 - StatusTransitionEngine: ownership-gated status changes
                 - aggregate: dashboard statistics

Quick Start:
    from materials_registry import MaterialsRegistryClient, load_config

    client = MaterialsRegistryClient.from_config(load_config())

    projection = await client.sync()
    result = await client.submit({
        "materialType": "perovskite",
        "properties": "bandgap=1.6eV",
        "researchInstitution": "MIT",
    })
    if result.needs_index_retry:
        result = await client.retry_index(result.record_id)

    await client.verify(result.record_id)
    stats = client.aggregate()

Updated: 2026-10-19
Version: 0.1.0
"""

from .config import RegistryConfig, load_config, configure_logging

from .errors import (
    RegistryError,
    StoreUnavailable,
    DecodeError,
    NotFound,
    Unauthorized,
    InvalidTransition,
    WriteFailure,
    PersistenceFailure,
    IndexCorrupt,
    PartialIndexFailure,
)

from .ledger import (
    LedgerClient,
    ContractLedgerClient,
    MockLedgerClient,
)

from .registry import (
    MaterialRecord,
    MaterialStatus,
    IndexManager,
    RegistryStore,
)

from .sync import (
    Projection,
    RegistrySynchronizer,
    MaterialSubmission,
    SubmissionPipeline,
    SubmissionResult,
    SubmissionStage,
    StatusTransitionEngine,
    TransitionResult,
    RegistryStats,
    aggregate,
)

from .client import MaterialsRegistryClient

__all__ = [
    # === Config ===
    "RegistryConfig",
    "load_config",
    "configure_logging",

    # === Errors ===
    "RegistryError",
    "StoreUnavailable",
    "DecodeError",
    "NotFound",
    "Unauthorized",
    "InvalidTransition",
    "WriteFailure",
    "PersistenceFailure",
    "IndexCorrupt",
    "PartialIndexFailure",

    # === Ledger ===
    "LedgerClient",
    "ContractLedgerClient",
    "MockLedgerClient",

    # === Registry ===
    "MaterialRecord",
    "MaterialStatus",
    "IndexManager",
    "RegistryStore",

    # === Sync ===
    "Projection",
    "RegistrySynchronizer",
    "MaterialSubmission",
    "SubmissionPipeline",
    "SubmissionResult",
    "SubmissionStage",
    "StatusTransitionEngine",
    "TransitionResult",
    "RegistryStats",
    "aggregate",

    # === Client ===
    "MaterialsRegistryClient",
]

__version__ = "0.1.0"
