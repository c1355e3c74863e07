# materials_registry/sync/__init__.py
"""
Materials Registry Sync Layer

Read path, write pipelines and statistics over the registry.

Components:
    RegistrySynchronizer / Projection: Full-registry load and local view
    SubmissionPipeline: Write record, then index it
    StatusTransitionEngine: Ownership-gated pending -> verified/rejected
    aggregate: Status counts and verified-type histogram
"""

from .synchronizer import (
    EMPTY_PROJECTION,
    Projection,
    RegistrySynchronizer,
)

from .pipeline import (
    MaterialSubmission,
    SubmissionPipeline,
    SubmissionResult,
    SubmissionStage,
    generate_record_id,
    placeholder_seal,
)

from .transitions import (
    StatusTransitionEngine,
    TransitionResult,
    TransitionStage,
    check_transition,
    is_owner,
)

from .aggregate import RegistryStats, aggregate

__all__ = [
    # Synchronizer
    "EMPTY_PROJECTION",
    "Projection",
    "RegistrySynchronizer",
    # Submission
    "MaterialSubmission",
    "SubmissionPipeline",
    "SubmissionResult",
    "SubmissionStage",
    "generate_record_id",
    "placeholder_seal",
    # Transitions
    "StatusTransitionEngine",
    "TransitionResult",
    "TransitionStage",
    "check_transition",
    "is_owner",
    # Stats
    "RegistryStats",
    "aggregate",
]
