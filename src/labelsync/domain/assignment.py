"""Bind entities to physical resources and release them again.

Moving an entity between slots leaves its previous slot holding stale data in
the registry. Both operations therefore report the slots that must be pushed as
cleared records alongside the updated entity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from labelsync.domain.model import Entity, SyncState
from labelsync.domain.pool import DEFAULT_POOL, PoolConfig, allocate_batch

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssignmentChange:
    entity: Entity
    slots_to_clear: tuple[str, ...] = ()


def assign_resource(entity: Entity, resource_id: str) -> AssignmentChange:
    """Bind ``entity`` to ``resource_id`` and free its placeholder slot."""

    resource_id = resource_id.strip()
    if not resource_id:
        raise ValueError("Resource id must not be empty")

    to_clear: list[str] = []
    if entity.placeholder_slot:
        to_clear.append(entity.placeholder_slot)
    if entity.bound_resource_id and entity.bound_resource_id != resource_id:
        to_clear.append(entity.bound_resource_id)

    updated = replace(
        entity,
        bound_resource_id=resource_id,
        placeholder_slot=None,
        sync_state=SyncState.PENDING,
    )
    log.info("Assigned entity %s to resource %s (clearing %s)", entity.id, resource_id, to_clear)
    return AssignmentChange(entity=updated, slots_to_clear=tuple(to_clear))


def unassign_resource(
    entity: Entity,
    used_ids: Iterable[str],
    preferred_ids: Iterable[str] | None = None,
    *,
    pool: PoolConfig = DEFAULT_POOL,
) -> AssignmentChange:
    """Release the entity's resource and park it on a fresh placeholder slot.

    Raises:
        PoolExhaustedError: if no placeholder slot is free.
    """

    if not entity.is_bound:
        return AssignmentChange(entity=entity)

    previous = entity.bound_resource_id
    (placeholder,) = allocate_batch(1, used_ids, preferred_ids, config=pool)
    updated = replace(
        entity,
        bound_resource_id=None,
        placeholder_slot=placeholder,
        sync_state=SyncState.PENDING,
    )
    log.info("Unassigned entity %s from %s; parked on %s", entity.id, previous, placeholder)
    return AssignmentChange(entity=updated, slots_to_clear=(previous,) if previous else ())
