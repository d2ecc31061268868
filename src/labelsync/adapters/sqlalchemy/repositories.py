"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update

from labelsync.adapters.sqlalchemy.mappings import entity_table
from labelsync.domain.model import Entity, GroupMembership, SyncState

if TYPE_CHECKING:
    import uuid

    from sqlalchemy import Row
    from sqlalchemy.orm import Session


def _membership_rows(entity: Entity) -> list[dict[str, str | None]]:
    return [
        {"group_name": m.group_name, "bound_resource_id": m.bound_resource_id}
        for m in entity.memberships
    ]


def _to_values(entity: Entity) -> dict[str, Any]:
    return {
        "placeholder_slot": entity.placeholder_slot,
        "bound_resource_id": entity.bound_resource_id,
        "fields": dict(entity.fields),
        "memberships": _membership_rows(entity),
        "sync_state": entity.sync_state,
        "last_synced_at": entity.last_synced_at,
    }


def _to_entity(row: Row[Any]) -> Entity:
    return Entity(
        id=row.id,
        placeholder_slot=row.placeholder_slot,
        bound_resource_id=row.bound_resource_id,
        fields=row.fields or {},
        memberships=tuple(
            GroupMembership(
                group_name=item["group_name"],
                bound_resource_id=item.get("bound_resource_id"),
            )
            for item in row.memberships or ()
        ),
        sync_state=SyncState(row.sync_state),
        last_synced_at=row.last_synced_at,
    )


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, entity_id: uuid.UUID) -> Entity | None:
        stmt = select(entity_table).where(entity_table.c.id == entity_id)
        row = self.session.execute(stmt).one_or_none()
        return _to_entity(row) if row is not None else None

    def list(self) -> list[Entity]:
        stmt = select(entity_table).order_by(
            entity_table.c.placeholder_slot, entity_table.c.bound_resource_id
        )
        return [_to_entity(row) for row in self.session.execute(stmt)]

    def upsert(self, entity: Entity) -> None:
        values = _to_values(entity)
        exists = self.session.execute(
            select(entity_table.c.id).where(entity_table.c.id == entity.id)
        ).first()
        if exists is None:
            self.session.execute(insert(entity_table).values(id=entity.id, **values))
        else:
            self.session.execute(
                update(entity_table).where(entity_table.c.id == entity.id).values(**values)
            )

    def remove(self, entity_id: uuid.UUID) -> None:
        self.session.execute(delete(entity_table).where(entity_table.c.id == entity_id))

    def used_placeholder_slots(self) -> set[str]:
        stmt = select(entity_table.c.placeholder_slot).where(
            entity_table.c.placeholder_slot.is_not(None)
        )
        return set(self.session.execute(stmt).scalars())
