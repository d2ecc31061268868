"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import EntityRepository
from .registry import DEFAULT_PAGE_SIZE, RecordFetcher, RecordPusher, fetch_all_records
from .unit_of_work import (
    EntityRepositories,
    EntityUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "EntityRepositories",
    "EntityRepository",
    "EntityUnitOfWork",
    "RecordFetcher",
    "RecordPusher",
    "RepositoryCollection",
    "UnitOfWork",
    "fetch_all_records",
]
