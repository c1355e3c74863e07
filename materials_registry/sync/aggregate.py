# materials_registry/sync/aggregate.py
"""Dashboard statistics over a projection."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable

from ..registry import MaterialRecord, MaterialStatus


@dataclass(frozen=True)
class RegistryStats:
    total: int = 0
    pending: int = 0
    verified: int = 0
    rejected: int = 0
    # material type -> count, verified records only, first-seen order
    verified_by_type: Dict[str, int] = field(default_factory=dict)


def aggregate(records: Iterable[MaterialRecord]) -> RegistryStats:
    """Count by status and histogram verified material types."""
    statuses: Counter = Counter()
    by_type: Dict[str, int] = {}
    total = 0

    for record in records:
        total += 1
        statuses[record.status] += 1
        if record.status is MaterialStatus.VERIFIED:
            by_type[record.material_type] = by_type.get(record.material_type, 0) + 1

    return RegistryStats(
        total=total,
        pending=statuses[MaterialStatus.PENDING],
        verified=statuses[MaterialStatus.VERIFIED],
        rejected=statuses[MaterialStatus.REJECTED],
        verified_by_type=by_type,
    )
