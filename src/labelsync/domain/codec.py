"""Translate entities to and from the registry's flat record format.

The registry only stores string fields, so cross-device metadata travels inside
the record under reserved keys (see ``labelsync.domain.model.record``):
the stable entity id, an echo of the slot, the modification time and the group
memberships serialised as one compact JSON array. Reserved keys never leak into
an entity's visible ``fields``.

Configuration that higher layers own (pinned constant fields, the addressing
field) is passed in through :class:`CodecConfig`; nothing here reads global
state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final
from uuid import NAMESPACE_URL, UUID, uuid5

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from labelsync.domain.model import (
    ENTITY_ID_KEY,
    LEGACY_GROUP_NAME_KEY,
    LEGACY_GROUP_SLOT_KEY,
    MEMBERSHIPS_KEY,
    METADATA_KEYS,
    MODIFIED_AT_KEY,
    RESERVED_KEYS,
    SLOT_KEY,
    Entity,
    ExternalRecord,
    GroupMembership,
    SyncState,
)
from labelsync.domain.pool import DEFAULT_POOL, PoolConfig, is_placeholder

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

# ids minted for records that carry no identity are derived from the slot,
# so decoding the same snapshot twice yields the same entity ids
LABELSYNC_NAMESPACE: Final[UUID] = uuid5(NAMESPACE_URL, "https://labelsync.invalid/entity")


@dataclass(frozen=True, slots=True)
class CodecConfig:
    """Registry-side settings the codec needs.

    Attributes:
        constant_fields: values pinned on every record, kept when a slot is cleared.
        slot_field: optional data field that mirrors the slot id (e.g. ``ARTICLE_ID``).
        name_field: data field whose value becomes the record's display name.
        pool: placeholder pool used to tell virtual slots from physical resources.
    """

    constant_fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    slot_field: str | None = None
    name_field: str | None = None
    pool: PoolConfig = DEFAULT_POOL

    def is_identity_key(self, key: str) -> bool:
        return key in RESERVED_KEYS or (self.slot_field is not None and key == self.slot_field)


DEFAULT_CODEC_CONFIG: Final[CodecConfig] = CodecConfig()


class MalformedMembershipDataError(ValueError):
    """Raised when a serialised membership list cannot be parsed."""


class _MembershipPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    group_name: str = Field(alias="groupName", min_length=1)
    bound_resource_id: str | None = Field(default=None, alias="boundResourceId")


_MEMBERSHIP_LIST = TypeAdapter(list[_MembershipPayload])


def dump_memberships(memberships: Iterable[GroupMembership]) -> str:
    """Serialise memberships as a compact JSON array, dropping blank group names."""

    payload = [
        _MembershipPayload(
            group_name=membership.group_name,
            bound_resource_id=membership.bound_resource_id,
        )
        for membership in memberships
        if membership.group_name.strip()
    ]
    return _MEMBERSHIP_LIST.dump_json(payload, by_alias=True, exclude_none=True).decode()


def load_memberships(raw: str) -> tuple[GroupMembership, ...]:
    """Parse a serialised membership list.

    Raises:
        MalformedMembershipDataError: if ``raw`` is not a JSON array of memberships.
    """

    try:
        payload = _MEMBERSHIP_LIST.validate_json(raw)
    except ValidationError as exc:
        raise MalformedMembershipDataError(f"Invalid membership data: {raw[:80]!r}") from exc
    return tuple(
        GroupMembership(
            group_name=item.group_name,
            bound_resource_id=item.bound_resource_id or None,
        )
        for item in payload
    )


# Encoding -----------------------------------------------------------------------


def _display_name(fields: Mapping[str, str], slot_id: str, config: CodecConfig) -> str:
    if config.name_field and fields.get(config.name_field):
        return fields[config.name_field]
    return slot_id


def encode(
    entity: Entity,
    *,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
    now: datetime | None = None,
) -> ExternalRecord:
    """Build the registry record for ``entity`` including its metadata fields."""

    slot_id = entity.effective_slot
    timestamp = (now or datetime.now(UTC)).astimezone(UTC)

    fields: dict[str, str] = {
        key: value for key, value in entity.fields.items() if not config.is_identity_key(key)
    }
    fields.update(config.constant_fields)
    if config.slot_field:
        fields[config.slot_field] = slot_id
    fields[ENTITY_ID_KEY] = str(entity.id)
    fields[SLOT_KEY] = slot_id
    fields[MODIFIED_AT_KEY] = timestamp.isoformat()
    if entity.memberships:
        fields[MEMBERSHIPS_KEY] = dump_memberships(entity.memberships)

    log.debug("Encoded entity %s into slot %s (%s field(s))", entity.id, slot_id, len(fields))
    return ExternalRecord(
        slot_id=slot_id,
        display_name=_display_name(fields, slot_id, config),
        fields=fields,
    )


def encode_cleared(
    slot_id: str,
    entity: Entity,
    *,
    config: CodecConfig = DEFAULT_CODEC_CONFIG,
) -> ExternalRecord:
    """Build a record that wipes ``slot_id`` while keeping pinned constants."""

    fields: dict[str, str] = dict.fromkeys(entity.fields, "")
    fields.update(dict.fromkeys(METADATA_KEYS, ""))
    fields.update(config.constant_fields)
    if config.slot_field:
        fields[config.slot_field] = slot_id

    log.debug("Encoded cleared record for slot %s (entity %s)", slot_id, entity.id)
    return ExternalRecord(slot_id=slot_id, display_name="", fields=fields)


# Decoding -----------------------------------------------------------------------


def has_content(record: ExternalRecord, *, config: CodecConfig = DEFAULT_CODEC_CONFIG) -> bool:
    """Whether any data field of ``record`` holds non-whitespace text.

    Identity keys and pinned constants do not count: a cleared slot still carries
    the constants.
    """

    return any(
        value.strip()
        for key, value in record.fields.items()
        if not config.is_identity_key(key) and key not in config.constant_fields
    )


def _decode_identity(record: ExternalRecord) -> UUID:
    raw = record.fields.get(ENTITY_ID_KEY, "").strip()
    if raw:
        try:
            return UUID(raw)
        except ValueError:
            log.warning("Record %s carries an unparsable entity id %r", record.slot_id, raw)
    return uuid5(LABELSYNC_NAMESPACE, record.slot_id)


def _decode_timestamp(record: ExternalRecord) -> datetime | None:
    raw = record.fields.get(MODIFIED_AT_KEY, "").strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        log.warning("Record %s carries an unparsable timestamp %r", record.slot_id, raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _decode_memberships(record: ExternalRecord) -> tuple[GroupMembership, ...]:
    raw = record.fields.get(MEMBERSHIPS_KEY, "").strip()
    if raw:
        try:
            return load_memberships(raw)
        except MalformedMembershipDataError:
            log.warning("Ignoring malformed membership data on record %s", record.slot_id)
            return ()

    legacy_name = record.fields.get(LEGACY_GROUP_NAME_KEY, "").strip()
    if legacy_name:
        legacy_slot = record.fields.get(LEGACY_GROUP_SLOT_KEY, "").strip() or None
        return (GroupMembership(group_name=legacy_name, bound_resource_id=legacy_slot),)
    return ()


def decode(
    record: ExternalRecord, *, config: CodecConfig = DEFAULT_CODEC_CONFIG
) -> Entity | None:
    """Rebuild an entity from ``record``; ``None`` if the record holds no real data."""

    if not has_content(record, config=config):
        return None

    entity_id = _decode_identity(record)
    slot_id = record.slot_id

    placeholder_slot: str | None = None
    bound_resource_id: str | None = None
    if is_placeholder(slot_id, config=config.pool):
        placeholder_slot = slot_id
    elif slot_id != str(entity_id):
        bound_resource_id = slot_id

    visible = {
        key: value for key, value in record.fields.items() if not config.is_identity_key(key)
    }

    return Entity(
        id=entity_id,
        placeholder_slot=placeholder_slot,
        bound_resource_id=bound_resource_id,
        fields=visible,
        memberships=_decode_memberships(record),
        sync_state=SyncState.SYNCED,
        last_synced_at=_decode_timestamp(record),
    )
