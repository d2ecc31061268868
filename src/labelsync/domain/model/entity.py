"""
Base building blocks:
entity identity, slot binding, and group memberships.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from labelsync.domain.model.enums import SyncState

if TYPE_CHECKING:
    from datetime import datetime


def new_id() -> UUID:
    return uuid4()


def _frozen_fields(values: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class GroupMembership:
    """One group an entity belongs to, with the binding recorded for that group.

    ``bound_resource_id`` is independent of the entity's live binding: it is the
    resource the entity should occupy whenever this group is applied.
    """

    group_name: str
    bound_resource_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Entity:
    """Addressable record (e.g. a person) synchronised with the external registry.

    Instances are immutable; every mutation helper returns a new entity.
    """

    id: UUID = field(default_factory=new_id)
    placeholder_slot: str | None = None
    bound_resource_id: str | None = None
    fields: Mapping[str, str] = field(default_factory=lambda: _frozen_fields(None))
    memberships: tuple[GroupMembership, ...] = ()
    sync_state: SyncState = SyncState.UNSYNCED
    last_synced_at: datetime | None = None

    def __post_init__(self) -> None:
        # normalise caller-supplied dicts/lists so the instance stays immutable
        object.__setattr__(self, "fields", _frozen_fields(self.fields))
        object.__setattr__(self, "memberships", tuple(self.memberships))

    @property
    def effective_slot(self) -> str:
        """Slot the entity occupies in the registry: binding, then placeholder, then id."""
        return self.bound_resource_id or self.placeholder_slot or str(self.id)

    @property
    def is_bound(self) -> bool:
        return self.bound_resource_id is not None

    @property
    def is_placeholder_only(self) -> bool:
        return self.bound_resource_id is None and self.placeholder_slot is not None
