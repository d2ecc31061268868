"""Create entities for freshly imported rows."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from labelsync.domain.model import Entity, SyncState, new_id
from labelsync.domain.pool import DEFAULT_POOL, PoolConfig, allocate_batch

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

log = getLogger(__name__)


def new_entities(
    rows: Sequence[Mapping[str, str]],
    used_ids: Iterable[str],
    preferred_ids: Iterable[str] | None = None,
    *,
    pool: PoolConfig = DEFAULT_POOL,
) -> list[Entity]:
    """Build one unsynced entity per row, each parked on its own placeholder slot.

    Slots are allocated in a single batch so rows never collide with each other.

    Raises:
        PoolExhaustedError: if the pool cannot hold every row.
    """

    slots = allocate_batch(len(rows), used_ids, preferred_ids, config=pool)
    entities = [
        Entity(
            id=new_id(),
            placeholder_slot=slot_id,
            fields={key: "" if value is None else str(value) for key, value in row.items()},
            sync_state=SyncState.UNSYNCED,
        )
        for row, slot_id in zip(rows, slots, strict=True)
    ]
    log.info("Created %s entit(ies) from imported rows", len(entities))
    return entities
