from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone
from uuid import UUID

import pytest

from labelsync.domain.codec import (
    CodecConfig,
    MalformedMembershipDataError,
    decode,
    dump_memberships,
    encode,
    encode_cleared,
    load_memberships,
)
from labelsync.domain.model import (
    ENTITY_ID_KEY,
    LEGACY_GROUP_NAME_KEY,
    LEGACY_GROUP_SLOT_KEY,
    MEMBERSHIPS_KEY,
    MODIFIED_AT_KEY,
    SLOT_KEY,
    Entity,
    ExternalRecord,
    GroupMembership,
    SyncState,
)
from tests.helpers.registry import make_entity, make_record

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def test_encode_writes_metadata_and_visible_fields() -> None:
    entity = make_entity("Ada", groups={"Team": "R1", "Night": None})

    record = encode(entity, now=NOW)

    assert record.slot_id == "POOL-0001"
    assert record.fields["NAME"] == "Ada"
    assert record.fields[ENTITY_ID_KEY] == str(entity.id)
    assert record.fields[SLOT_KEY] == "POOL-0001"
    assert record.fields[MODIFIED_AT_KEY] == "2025-03-01T12:00:00+00:00"
    assert record.fields[MEMBERSHIPS_KEY] == (
        '[{"groupName":"Team","boundResourceId":"R1"},{"groupName":"Night"}]'
    )


def test_encode_omits_memberships_key_when_empty() -> None:
    record = encode(make_entity(), now=NOW)

    assert MEMBERSHIPS_KEY not in record.fields


def test_encode_prefers_binding_over_placeholder() -> None:
    entity = make_entity(placeholder_slot=None, bound_resource_id="A17")

    assert encode(entity, now=NOW).slot_id == "A17"


def test_encode_applies_constants_slot_field_and_display_name() -> None:
    config = CodecConfig(
        constant_fields={"STORE": "S01"},
        slot_field="ARTICLE_ID",
        name_field="NAME",
    )
    entity = make_entity("Ada", placeholder_slot=None, bound_resource_id="A17")

    record = encode(entity, config=config, now=NOW)

    assert record.fields["STORE"] == "S01"
    assert record.fields["ARTICLE_ID"] == "A17"
    assert record.display_name == "Ada"


def test_encode_converts_timestamp_to_utc() -> None:
    local = datetime(2025, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    record = encode(make_entity(), now=local)

    assert record.fields[MODIFIED_AT_KEY] == "2025-03-01T12:00:00+00:00"


def test_encode_cleared_blanks_data_but_keeps_constants() -> None:
    config = CodecConfig(constant_fields={"STORE": "S01"}, slot_field="ARTICLE_ID")
    entity = make_entity("Ada")

    record = encode_cleared("POOL-0001", entity, config=config)

    assert record.slot_id == "POOL-0001"
    assert record.display_name == ""
    assert record.fields["NAME"] == ""
    assert record.fields[ENTITY_ID_KEY] == ""
    assert record.fields[MEMBERSHIPS_KEY] == ""
    assert record.fields["STORE"] == "S01"
    assert record.fields["ARTICLE_ID"] == "POOL-0001"
    assert decode(record, config=config) is None


def test_round_trip_preserves_entity_state() -> None:
    entity = make_entity("Ada", groups={"Team": "R1", "Night": None})

    decoded = decode(encode(entity, now=NOW))

    assert decoded is not None
    assert decoded.id == entity.id
    assert decoded.placeholder_slot == entity.placeholder_slot
    assert decoded.bound_resource_id is None
    assert dict(decoded.fields) == {"NAME": "Ada"}
    assert decoded.memberships == entity.memberships
    assert decoded.sync_state is SyncState.SYNCED
    assert decoded.last_synced_at == NOW


def test_round_trip_of_bound_entity() -> None:
    entity = make_entity("Ada", placeholder_slot=None, bound_resource_id="A17")

    decoded = decode(encode(entity, now=NOW))

    assert decoded is not None
    assert decoded.bound_resource_id == "A17"
    assert decoded.placeholder_slot is None


def test_round_trip_of_unslotted_entity() -> None:
    entity = Entity(fields={"NAME": "Ada"})

    decoded = decode(encode(entity, now=NOW))

    assert decoded is not None
    assert decoded.id == entity.id
    assert decoded.placeholder_slot is None
    assert decoded.bound_resource_id is None


def test_decode_returns_none_for_blank_record() -> None:
    record = make_record("A17", NAME="  ", **{ENTITY_ID_KEY: "x", SLOT_KEY: "A17"})

    assert decode(record) is None


def test_decode_derives_stable_id_when_identity_missing() -> None:
    record = make_record("A17", NAME="Ada")

    first = decode(record)
    second = decode(record)

    assert first is not None
    assert second is not None
    assert first.id == second.id
    assert first.bound_resource_id == "A17"
    assert first.last_synced_at is None


def test_decode_replaces_invalid_identity(caplog: pytest.LogCaptureFixture) -> None:
    record = make_record("A17", NAME="Ada", **{ENTITY_ID_KEY: "not-a-uuid"})

    with caplog.at_level(logging.WARNING):
        entity = decode(record)

    assert entity is not None
    assert isinstance(entity.id, UUID)
    assert "unparsable entity id" in caplog.text


def test_decode_hides_reserved_and_slot_fields() -> None:
    config = CodecConfig(slot_field="ARTICLE_ID")
    record = make_record(
        "A17",
        NAME="Ada",
        ARTICLE_ID="A17",
        **{LEGACY_GROUP_NAME_KEY: "Team", LEGACY_GROUP_SLOT_KEY: "R1"},
    )

    entity = decode(record, config=config)

    assert entity is not None
    assert dict(entity.fields) == {"NAME": "Ada"}


def test_decode_accepts_zulu_timestamp() -> None:
    record = make_record("A17", NAME="Ada", **{MODIFIED_AT_KEY: "2025-03-01T12:00:00Z"})

    entity = decode(record)

    assert entity is not None
    assert entity.last_synced_at == NOW


def test_decode_ignores_malformed_memberships(caplog: pytest.LogCaptureFixture) -> None:
    record = make_record("A17", NAME="Ada", **{MEMBERSHIPS_KEY: "{not json"})

    with caplog.at_level(logging.WARNING):
        entity = decode(record)

    assert entity is not None
    assert entity.memberships == ()
    assert "malformed membership data" in caplog.text


def test_decode_synthesizes_membership_from_legacy_fields() -> None:
    record = make_record(
        "A17", NAME="Ada", **{LEGACY_GROUP_NAME_KEY: "Team", LEGACY_GROUP_SLOT_KEY: "R1"}
    )

    entity = decode(record)

    assert entity is not None
    assert entity.memberships == (GroupMembership("Team", "R1"),)


def test_memberships_key_wins_over_legacy_fields() -> None:
    record = make_record(
        "A17",
        NAME="Ada",
        **{
            MEMBERSHIPS_KEY: '[{"groupName":"New"}]',
            LEGACY_GROUP_NAME_KEY: "Old",
        },
    )

    entity = decode(record)

    assert entity is not None
    assert entity.memberships == (GroupMembership("New"),)


def test_membership_serialization_helpers() -> None:
    memberships = (GroupMembership("Team", "R1"), GroupMembership("Night"))

    assert load_memberships(dump_memberships(memberships)) == memberships
    assert load_memberships('[{"groupName":"Team","boundResourceId":""}]') == (
        GroupMembership("Team"),
    )
    with pytest.raises(MalformedMembershipDataError):
        load_memberships('[{"boundResourceId":"R1"}]')
    with pytest.raises(MalformedMembershipDataError):
        load_memberships('{"groupName":"Team"}')


def test_encode_drops_memberships_with_blank_names() -> None:
    entity = replace(
        make_entity(), memberships=(GroupMembership(""), GroupMembership("Team", "R1"))
    )

    record = encode(entity, now=NOW)

    assert record.fields[MEMBERSHIPS_KEY] == '[{"groupName":"Team","boundResourceId":"R1"}]'
    assert dump_memberships([GroupMembership("  ")]) == "[]"


def test_external_record_fields_are_read_only() -> None:
    record = ExternalRecord(slot_id="A17", fields={"NAME": "Ada"})

    with pytest.raises(TypeError):
        record.fields["NAME"] = "Eve"  # type: ignore[index]


def test_encode_is_stable_apart_from_timestamp() -> None:
    entity = make_entity("Ada", groups={"Team": "R1"})

    first = encode(entity, now=NOW)
    second = encode(entity, now=NOW + timedelta(minutes=5))

    differing = {key for key in first.fields if first.fields[key] != second.fields[key]}
    assert differing == {MODIFIED_AT_KEY}


def test_cleared_record_without_constants_decodes_as_empty() -> None:
    entity = make_entity("Ada", groups={"Team": "R1"})

    assert decode(encode_cleared("POOL-0001", entity)) is None


def test_identity_only_record_is_empty() -> None:
    record = make_record("POOL-0001", **{ENTITY_ID_KEY: "3f1c9a34-0e57-4a34-9d0c-1a2b3c4d5e6f"})

    assert decode(record) is None
