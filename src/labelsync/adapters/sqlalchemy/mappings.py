"""SQLAlchemy table metadata for locally stored entities."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
)

from labelsync.domain.model import SyncState

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

entity_table = Table(
    "entity",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("placeholder_slot", String(64), nullable=True),
    Column("bound_resource_id", String(128), nullable=True),
    Column("fields", JSON, nullable=False, default=dict),
    # list of {"group_name": ..., "bound_resource_id": ...}
    Column("memberships", JSON, nullable=False, default=list),
    Column("sync_state", Enum(SyncState, native_enum=False), nullable=False),
    Column("last_synced_at", UTCDateTime(), nullable=True),
    Index("ix_entity_placeholder_slot", "placeholder_slot"),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine)
