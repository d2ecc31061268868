"""Group membership rules.

An entity can belong to any number of named groups. Each membership records
its own resource binding, independent of the entity's live binding, so a group
can be "applied" later to restore the bindings it was saved with. Groups have
no lifecycle of their own: a group exists while at least one entity references
it.

Group names have two forms. The display form is what users type
(``"Floor 2 East"``); the stored form joins words with underscores
(``"Floor_2_East"``). Validation always runs on the display form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from labelsync.domain.assignment import assign_resource
from labelsync.domain.model import Entity, GroupMembership

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence
    from uuid import UUID

log = getLogger(__name__)

GROUP_NAME_MAX_LENGTH: Final[int] = 20
_WHITESPACE_RUN: Final[re.Pattern[str]] = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class NameValidation:
    valid: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class Group:
    """Derived view of one group and the entities that reference it."""

    name: str
    display_name: str
    members: tuple[Entity, ...]


@dataclass(frozen=True, slots=True)
class GroupChange:
    """Outcome of a collection-level group operation."""

    entities: list[Entity]
    changed: int = 0
    validation: NameValidation = NameValidation(valid=True)
    slots_to_clear: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.validation.valid


# Single-entity operations -----------------------------------------------------


def names_of(entity: Entity) -> list[str]:
    return [membership.group_name for membership in entity.memberships]


def slot_in(entity: Entity, group_name: str) -> str | None:
    """Return the binding recorded for ``group_name`` (not the live binding)."""

    for membership in entity.memberships:
        if membership.group_name == group_name:
            return membership.bound_resource_id
    return None


def is_in(entity: Entity, group_name: str) -> bool:
    return any(membership.group_name == group_name for membership in entity.memberships)


def set_membership(
    entity: Entity, group_name: str, bound_resource_id: str | None = None
) -> Entity:
    """Insert a membership or update the existing one in place.

    Raises:
        ValueError: if ``group_name`` is blank.
    """

    if not group_name.strip():
        raise ValueError("Group name must not be empty")
    updated = GroupMembership(group_name=group_name, bound_resource_id=bound_resource_id)
    memberships = list(entity.memberships)
    for index, membership in enumerate(memberships):
        if membership.group_name == group_name:
            memberships[index] = updated
            break
    else:
        memberships.append(updated)
    return replace(entity, memberships=tuple(memberships))


def remove(entity: Entity, group_name: str) -> Entity:
    memberships = tuple(m for m in entity.memberships if m.group_name != group_name)
    return replace(entity, memberships=memberships)


# Names ------------------------------------------------------------------------


def normalize_name(display_name: str) -> str:
    """Display form to stored form (trim, whitespace runs become one underscore)."""

    return _WHITESPACE_RUN.sub("_", display_name.strip())


def denormalize_name(stored_name: str) -> str:
    return stored_name.replace("_", " ")


def _is_allowed_char(char: str) -> bool:
    return char.isalpha() or char.isdigit() or char.isspace()


def validate_name(display_name: str) -> NameValidation:
    trimmed = display_name.strip()
    if not trimmed:
        return NameValidation(valid=False, error="Group name is required")
    if len(trimmed) > GROUP_NAME_MAX_LENGTH:
        return NameValidation(
            valid=False, error=f"Max {GROUP_NAME_MAX_LENGTH} characters allowed"
        )
    if not all(_is_allowed_char(char) for char in trimmed):
        return NameValidation(valid=False, error="Only letters, numbers, and spaces allowed")
    return NameValidation(valid=True)


# Collection operations ----------------------------------------------------------


def derive_groups(entities: Iterable[Entity]) -> list[Group]:
    """Group entities by every group they belong to, sorted by display name."""

    members_by_group: dict[str, list[Entity]] = {}
    for entity in entities:
        for group_name in names_of(entity):
            members_by_group.setdefault(group_name, []).append(entity)

    groups = [
        Group(name=name, display_name=denormalize_name(name), members=tuple(members))
        for name, members in members_by_group.items()
    ]
    groups.sort(key=lambda group: group.display_name.casefold())
    return groups


def save_group(entities: Sequence[Entity], display_name: str) -> GroupChange:
    """Add every entity to a group, recording its current binding for that group."""

    validation = validate_name(display_name)
    if not validation.valid:
        log.warning("Invalid group name %r: %s", display_name, validation.error)
        return GroupChange(entities=list(entities), validation=validation)

    group_name = normalize_name(display_name)
    updated = [
        set_membership(entity, group_name, entity.bound_resource_id) for entity in entities
    ]
    log.info("Saved group %s with %s member(s)", group_name, len(updated))
    return GroupChange(entities=updated, changed=len(updated), validation=validation)


def add_to_group(
    entities: Sequence[Entity],
    entity_ids: Collection[UUID],
    group_name: str,
    *,
    with_current_binding: bool = True,
) -> GroupChange:
    """Add the selected entities to ``group_name``; existing members are left alone."""

    added = 0
    updated: list[Entity] = []
    for entity in entities:
        if entity.id in entity_ids and not is_in(entity, group_name):
            binding = entity.bound_resource_id if with_current_binding else None
            entity = set_membership(entity, group_name, binding)
            added += 1
        updated.append(entity)
    log.info("Added %s entit(ies) to group %s", added, group_name)
    return GroupChange(entities=updated, changed=added)


def remove_from_group(
    entities: Sequence[Entity], entity_ids: Collection[UUID], group_name: str
) -> GroupChange:
    removed = 0
    updated: list[Entity] = []
    for entity in entities:
        if entity.id in entity_ids and is_in(entity, group_name):
            entity = remove(entity, group_name)
            removed += 1
        updated.append(entity)
    log.info("Removed %s entit(ies) from group %s", removed, group_name)
    return GroupChange(entities=updated, changed=removed)


def delete_group(entities: Sequence[Entity], group_name: str) -> GroupChange:
    """Delete a group by removing its membership from every referencing entity."""

    affected = 0
    updated: list[Entity] = []
    for entity in entities:
        if is_in(entity, group_name):
            entity = remove(entity, group_name)
            affected += 1
        updated.append(entity)
    log.info("Deleted group %s (%s member(s) affected)", group_name, affected)
    return GroupChange(entities=updated, changed=affected)


def apply_group_bindings(entities: Sequence[Entity], group_name: str) -> GroupChange:
    """Restore live bindings from ``group_name``.

    Only members with a recorded binding for the group are rebound, through
    :func:`~labelsync.domain.assignment.assign_resource`. Every other entity is
    returned unchanged. The slots vacated by rebinding are collected in
    ``slots_to_clear``.
    """

    changed = 0
    to_clear: list[str] = []
    updated: list[Entity] = []
    for entity in entities:
        target = slot_in(entity, group_name)
        if target and target != entity.bound_resource_id:
            assignment = assign_resource(entity, target)
            entity = assignment.entity
            to_clear.extend(assignment.slots_to_clear)
            changed += 1
        updated.append(entity)
    log.info("Applied bindings of group %s: %s change(s)", group_name, changed)
    return GroupChange(entities=updated, changed=changed, slots_to_clear=tuple(to_clear))
