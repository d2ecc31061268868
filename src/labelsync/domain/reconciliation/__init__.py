"""Reconciliation of registry snapshots into domain entities.

Flow:
1) decode every record with the external record codec
2) drop records that carry no real data
3) keep the last record seen for each entity id
4) report group names that local state does not know yet
"""

from __future__ import annotations

from .engine import (
    ReconciliationResult,
    discover_groups,
    reconcile,
    reconcile_snapshot,
)

__all__ = [
    "ReconciliationResult",
    "discover_groups",
    "reconcile",
    "reconcile_snapshot",
]
