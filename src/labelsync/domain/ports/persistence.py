"""Ports for persisting entities locally."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from labelsync.domain.model import Entity


@runtime_checkable
class EntityRepository(Protocol):
    """Persistence contract for entities, keyed by entity id."""

    def get(self, entity_id: UUID) -> Entity | None: ...

    def list(self) -> list[Entity]: ...

    def upsert(self, entity: Entity) -> None: ...

    def remove(self, entity_id: UUID) -> None: ...

    def used_placeholder_slots(self) -> set[str]: ...


__all__ = ["EntityRepository"]
