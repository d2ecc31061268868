"""Application services that move entities between local state and the registry."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from labelsync.domain.codec import DEFAULT_CODEC_CONFIG, CodecConfig, encode, encode_cleared
from labelsync.domain.ingest import new_entities
from labelsync.domain.model import SyncState
from labelsync.domain.ports.registry import DEFAULT_PAGE_SIZE, fetch_all_records
from labelsync.domain.reconciliation import reconcile_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from labelsync.domain.model import Entity
    from labelsync.domain.ports import EntityUnitOfWork, RecordFetcher, RecordPusher

log = getLogger(__name__)

_UNPUSHED: Final = frozenset({SyncState.UNSYNCED, SyncState.PENDING})


class PushFailedError(RuntimeError):
    """Raised when the registry rejects a push."""

    def __init__(self, entities: list[Entity]) -> None:
        self.entities = entities
        super().__init__(f"Failed to push {len(entities)} entit(ies) to the registry")


@dataclass(slots=True)
class PullResult:
    """Outcome of pulling a registry snapshot into local state."""

    fetched: int
    stored: int
    skipped_empty: int
    removed: int = 0
    discovered_groups: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PushResult:
    """Outcome of pushing entities to the registry."""

    pushed: int
    entities: list[Entity]


def pull_from_registry(
    *,
    fetcher: RecordFetcher,
    unit_of_work_factory: Callable[[], EntityUnitOfWork],
    page_size: int = DEFAULT_PAGE_SIZE,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> PullResult:
    """Fetch every page, reconcile the snapshot and upsert the entities by id.

    Local entities missing from the snapshot are removed unless they carry
    unpushed changes (``UNSYNCED`` or ``PENDING``). A slot cleared by another
    client is then free again for allocation.
    """

    records = fetch_all_records(fetcher, page_size)

    with unit_of_work_factory() as uow:
        repository = uow.repositories.entities
        local = repository.list()
        known_groups = {
            membership.group_name for entity in local for membership in entity.memberships
        }
        result = reconcile_snapshot(records, known_groups=known_groups, config=config)
        for entity in result.entities:
            repository.upsert(entity)

        snapshot_ids = {entity.id for entity in result.entities}
        stale = [
            entity
            for entity in local
            if entity.id not in snapshot_ids and entity.sync_state not in _UNPUSHED
        ]
        for entity in stale:
            repository.remove(entity.id)
        uow.commit()

    if stale:
        log.info("Removed %s entit(ies) no longer present in the registry", len(stale))
    if result.discovered_groups:
        log.info("Discovered new group(s): %s", ", ".join(result.discovered_groups))

    return PullResult(
        fetched=len(records),
        stored=len(result.entities),
        skipped_empty=result.skipped_empty,
        removed=len(stale),
        discovered_groups=result.discovered_groups,
    )


def push_to_registry(
    entities: Sequence[Entity],
    *,
    pusher: RecordPusher,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
    now: datetime | None = None,
) -> PushResult:
    """Encode and push ``entities``; returns them with their new sync state.

    Raises:
        PushFailedError: if the pusher fails. It carries the entities marked
            ``SyncState.ERROR`` and chains the original exception.
    """

    if not entities:
        return PushResult(pushed=0, entities=[])

    timestamp = now or datetime.now(UTC)
    records = [encode(entity, config=config, now=timestamp) for entity in entities]
    try:
        pusher.push_records(records)
    except Exception as exc:
        log.exception("Pushing %s record(s) to the registry failed", len(records))
        raise PushFailedError(mark_failed(entities)) from exc

    synced = [
        replace(entity, sync_state=SyncState.SYNCED, last_synced_at=timestamp)
        for entity in entities
    ]
    log.info("Pushed %s record(s) to the registry", len(records))
    return PushResult(pushed=len(records), entities=synced)


def mark_failed(entities: Iterable[Entity]) -> list[Entity]:
    return [replace(entity, sync_state=SyncState.ERROR) for entity in entities]


def import_rows(
    rows: Sequence[Mapping[str, str]],
    *,
    unit_of_work_factory: Callable[[], EntityUnitOfWork],
    preferred_ids: Iterable[str] | None = None,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> list[Entity]:
    """Allocate placeholder slots for ``rows`` and store the new entities.

    The used-slot set is read inside the unit of work, so allocation runs against
    the stored state rather than a caller's snapshot.
    """

    with unit_of_work_factory() as uow:
        repository = uow.repositories.entities
        used = repository.used_placeholder_slots()
        created = new_entities(rows, used, preferred_ids, pool=config.pool)
        for entity in created:
            repository.upsert(entity)
        uow.commit()
    return created


def clear_slots(
    slot_ids: Iterable[str],
    entity: Entity,
    *,
    pusher: RecordPusher,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> int:
    """Push cleared records for ``slot_ids`` so they stop showing ``entity``'s data."""

    records = [encode_cleared(slot_id, entity, config=config) for slot_id in slot_ids]
    if not records:
        return 0
    pusher.push_records(records)
    log.info("Cleared %s slot(s) previously used by entity %s", len(records), entity.id)
    return len(records)
