"""Placeholder slot allocation.

Placeholder slots (``POOL-0001`` ... ``POOL-9999``) stand in for a physical
resource until an entity is bound to one. Allocation is stateless: callers pass
the set of slots they currently consider in use and receive fresh slots back.
The lowest free number is always reused first so the visible id space stays
dense.

Concurrent callers must serialise around the authoritative "used" set; two
allocations from the same stale snapshot can hand out the same slot.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

DEFAULT_POOL_PREFIX: Final[str] = "POOL-"
DEFAULT_POOL_START: Final[int] = 1
DEFAULT_POOL_MAX_SIZE: Final[int] = 9999
DEFAULT_POOL_WIDTH: Final[int] = 4


@dataclass(frozen=True, slots=True)
class PoolConfig:
    prefix: str = DEFAULT_POOL_PREFIX
    start: int = DEFAULT_POOL_START
    max_size: int = DEFAULT_POOL_MAX_SIZE
    width: int = DEFAULT_POOL_WIDTH

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError("Pool prefix must not be empty")
        if self.start < 0 or self.max_size < self.start:
            raise ValueError(f"Invalid pool range: {self.start}..{self.max_size}")

    @property
    def capacity(self) -> int:
        return self.max_size - self.start + 1


DEFAULT_POOL: Final[PoolConfig] = PoolConfig()


class PoolExhaustedError(RuntimeError):
    """Raised when every slot in the pool range is already in use."""

    def __init__(self, *, requested: int, capacity: int) -> None:
        self.requested = requested
        self.capacity = capacity
        super().__init__(
            f"Placeholder pool exhausted: requested {requested} slot(s), capacity {capacity}"
        )


def is_placeholder(slot_id: str, *, config: PoolConfig = DEFAULT_POOL) -> bool:
    return slot_id.startswith(config.prefix)


def extract_number(slot_id: str, *, config: PoolConfig = DEFAULT_POOL) -> int | None:
    """Return the numeric suffix of a placeholder slot, or ``None``."""

    if not is_placeholder(slot_id, config=config):
        return None
    suffix = slot_id[len(config.prefix) :]
    if not suffix.isdecimal():
        return None
    return int(suffix)


def format_slot(number: int, *, config: PoolConfig = DEFAULT_POOL) -> str:
    return f"{config.prefix}{number:0{config.width}d}"


def _used_numbers(used_ids: Iterable[str], config: PoolConfig) -> set[int]:
    numbers: set[int] = set()
    for slot_id in used_ids:
        number = extract_number(slot_id, config=config)
        if number is not None:
            numbers.add(number)
    return numbers


def next_available(used_ids: Iterable[str], *, config: PoolConfig = DEFAULT_POOL) -> str:
    """Return the lowest-numbered slot not present in ``used_ids``.

    Raises:
        PoolExhaustedError: if no slot in the configured range is free.
    """

    used = _used_numbers(used_ids, config)

    counter = config.start
    while counter in used and counter <= config.max_size:
        counter += 1

    if counter > config.max_size:
        # every number up to the ceiling looked taken; rescan for any gap
        gap = next(
            (n for n in range(config.start, config.max_size + 1) if n not in used),
            None,
        )
        if gap is None:
            raise PoolExhaustedError(requested=1, capacity=config.capacity)
        counter = gap

    candidate = format_slot(counter, config=config)
    log.debug("Generated placeholder slot %s (used=%s)", candidate, len(used))
    return candidate


def allocate_batch(
    count: int,
    used_ids: Iterable[str],
    preferred_ids: Iterable[str] | None = None,
    *,
    config: PoolConfig = DEFAULT_POOL,
) -> list[str]:
    """Allocate ``count`` distinct slots, none of them in ``used_ids``.

    ``preferred_ids`` are slots known to be empty in the registry but not tracked
    locally. They are consumed first, lowest number first. Ids are compared by
    number, so a preferred id is skipped when its number is already used or lies
    outside the pool range, and spellings of one number count once. Remaining
    demand is filled from the lowest gaps.

    Raises:
        ValueError: if ``count`` is negative.
        PoolExhaustedError: if the pool cannot supply ``count`` slots.
    """

    if count < 0:
        raise ValueError(f"Cannot allocate a negative number of slots: {count}")

    working = set(used_ids)
    allocated: list[str] = []

    if preferred_ids:
        used_numbers = _used_numbers(working, config)
        # number -> first spelling seen; "POOL-02" and "POOL-0002" are one slot
        preferred_by_number: dict[int, str] = {}
        for slot_id in preferred_ids:
            number = extract_number(slot_id, config=config)
            if number is None or number in used_numbers:
                continue
            if config.start <= number <= config.max_size:
                preferred_by_number.setdefault(number, slot_id)
        for number in sorted(preferred_by_number)[:count]:
            slot_id = preferred_by_number[number]
            allocated.append(slot_id)
            working.add(slot_id)

    reused = len(allocated)
    try:
        while len(allocated) < count:
            slot_id = next_available(working, config=config)
            allocated.append(slot_id)
            working.add(slot_id)
    except PoolExhaustedError as exc:
        raise PoolExhaustedError(requested=count, capacity=config.capacity) from exc

    log.info(
        "Allocated %s placeholder slot(s): reused=%s, minted=%s",
        len(allocated),
        reused,
        len(allocated) - reused,
    )
    return allocated
