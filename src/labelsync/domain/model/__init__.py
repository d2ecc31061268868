"""Public domain model surface."""

from __future__ import annotations

from labelsync.domain.model.entity import Entity, GroupMembership, new_id
from labelsync.domain.model.enums import SyncState
from labelsync.domain.model.record import (
    ENTITY_ID_KEY,
    LEGACY_GROUP_NAME_KEY,
    LEGACY_GROUP_SLOT_KEY,
    MEMBERSHIPS_KEY,
    METADATA_KEYS,
    MODIFIED_AT_KEY,
    RESERVED_KEYS,
    SLOT_KEY,
    ExternalRecord,
    is_reserved_key,
)

__all__ = [  # noqa: RUF022
    # entities
    "Entity",
    "GroupMembership",
    "new_id",
    # enums
    "SyncState",
    # external records
    "ExternalRecord",
    "is_reserved_key",
    "ENTITY_ID_KEY",
    "SLOT_KEY",
    "MODIFIED_AT_KEY",
    "MEMBERSHIPS_KEY",
    "LEGACY_GROUP_NAME_KEY",
    "LEGACY_GROUP_SLOT_KEY",
    "METADATA_KEYS",
    "RESERVED_KEYS",
]
