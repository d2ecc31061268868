"""Ports for exchanging records with the external registry."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from labelsync.domain.model import ExternalRecord

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


@runtime_checkable
class RecordPusher(Protocol):
    """Write records to the registry, replacing whatever each slot held."""

    def push_records(self, records: Sequence[ExternalRecord]) -> None: ...


@runtime_checkable
class RecordFetcher(Protocol):
    """Read one page of records from the registry (pages start at 0)."""

    def fetch_records(self, page: int, page_size: int) -> list[ExternalRecord]: ...


def fetch_all_records(
    fetcher: RecordFetcher, page_size: int = DEFAULT_PAGE_SIZE
) -> list[ExternalRecord]:
    """Collect every page until the registry returns a short page."""

    if page_size <= 0:
        raise ValueError(f"Page size must be positive: {page_size}")

    records: list[ExternalRecord] = []
    page = 0
    while True:
        batch = fetcher.fetch_records(page, page_size)
        records.extend(batch)
        log.debug("Fetched page %s with %s record(s)", page, len(batch))
        if len(batch) < page_size:
            break
        page += 1
    log.info("Fetched %s record(s) across %s page(s)", len(records), page + 1)
    return records


__all__ = ["DEFAULT_PAGE_SIZE", "RecordFetcher", "RecordPusher", "fetch_all_records"]
