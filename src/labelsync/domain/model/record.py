"""External registry record shape and its reserved metadata keys."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

ENTITY_ID_KEY: Final[str] = "__ENTITY_ID__"
SLOT_KEY: Final[str] = "__SLOT__"
MODIFIED_AT_KEY: Final[str] = "__MODIFIED_AT__"
MEMBERSHIPS_KEY: Final[str] = "__MEMBERSHIPS__"

# single-group shape written by older clients; read-only
LEGACY_GROUP_NAME_KEY: Final[str] = "_LIST_NAME_"
LEGACY_GROUP_SLOT_KEY: Final[str] = "_LIST_SPACE_"

METADATA_KEYS: Final[tuple[str, ...]] = (ENTITY_ID_KEY, SLOT_KEY, MODIFIED_AT_KEY, MEMBERSHIPS_KEY)
RESERVED_KEYS: Final[frozenset[str]] = frozenset(
    (*METADATA_KEYS, LEGACY_GROUP_NAME_KEY, LEGACY_GROUP_SLOT_KEY)
)


def is_reserved_key(key: str) -> bool:
    return key in RESERVED_KEYS


@dataclass(frozen=True, slots=True)
class ExternalRecord:
    """Flat key/value record as stored by the external registry."""

    slot_id: str
    display_name: str = ""
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
