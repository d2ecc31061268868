"""Rebuild domain entities from a registry snapshot.

Reconciliation is a pure function of its input: the same snapshot always yields
the same entities in the same order. It does not persist anything; callers
upsert the result into local state by entity id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from labelsync.domain.codec import DEFAULT_CODEC_CONFIG, CodecConfig, decode
from labelsync.domain.model import SLOT_KEY
from labelsync.domain.pool import is_placeholder

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable
    from uuid import UUID

    from labelsync.domain.model import Entity, ExternalRecord

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationResult:
    """Entities rebuilt from one snapshot plus bookkeeping counters."""

    entities: list[Entity] = field(default_factory=list)
    skipped_empty: int = 0
    duplicates: int = 0
    normalized: int = 0
    discovered_groups: list[str] = field(default_factory=list)


def discover_groups(entities: Iterable[Entity], known_groups: Collection[str] = ()) -> list[str]:
    """Group names referenced by ``entities`` but absent from ``known_groups``.

    Names are returned in order of first appearance.
    """

    discovered: dict[str, None] = {}
    for entity in entities:
        for membership in entity.memberships:
            name = membership.group_name
            if name and name not in known_groups:
                discovered.setdefault(name, None)
    return list(discovered)


def _echoes_foreign_placeholder(record: ExternalRecord, config: CodecConfig) -> bool:
    echo = record.fields.get(SLOT_KEY, "").strip()
    return (
        bool(echo)
        and echo != record.slot_id
        and is_placeholder(echo, config=config.pool)
        and not is_placeholder(record.slot_id, config=config.pool)
    )


def reconcile_snapshot(
    records: Iterable[ExternalRecord],
    *,
    known_groups: Collection[str] = (),
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> ReconciliationResult:
    """Decode ``records``, drop empty ones and keep the last record per entity id."""

    result = ReconciliationResult()
    by_id: dict[UUID, Entity] = {}

    for record in records:
        entity = decode(record, config=config)
        if entity is None:
            result.skipped_empty += 1
            continue

        if _echoes_foreign_placeholder(record, config):
            # the physical slot is authoritative; the stale placeholder echo is dropped
            log.warning(
                "Record %s echoes placeholder %s; keeping the physical binding",
                record.slot_id,
                record.fields.get(SLOT_KEY),
            )
            result.normalized += 1

        if entity.id in by_id:
            log.debug("Entity %s appears again in slot %s; later record wins", entity.id, record.slot_id)
            result.duplicates += 1
        by_id[entity.id] = entity

    result.entities = list(by_id.values())
    result.discovered_groups = discover_groups(result.entities, known_groups)

    log.info(
        "Reconciled snapshot: entities=%s, skipped_empty=%s, duplicates=%s, "
        "normalized=%s, new_groups=%s",
        len(result.entities),
        result.skipped_empty,
        result.duplicates,
        result.normalized,
        len(result.discovered_groups),
    )
    return result


def reconcile(
    records: Iterable[ExternalRecord],
    *,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> list[Entity]:
    """Return the entities contained in a registry snapshot."""

    return reconcile_snapshot(records, config=config).entities
