"""SQLAlchemy adapter package for labelsync."""

from __future__ import annotations

from .mappings import create_all_tables, entity_table, metadata
from .repositories import SqlAlchemyEntityRepository
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyEntityRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "entity_table",
    "metadata",
    "shutdown",
    "startup",
]
