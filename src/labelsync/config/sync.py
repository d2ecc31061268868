"""Synchronization defaults for registry services."""

from __future__ import annotations

from dataclasses import dataclass

from labelsync.domain.ports.registry import DEFAULT_PAGE_SIZE


@dataclass(frozen=True, slots=True)
class SyncConfig:
    page_size: int = DEFAULT_PAGE_SIZE


def get_sync_config() -> SyncConfig:
    return SyncConfig()
