"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SyncState(StrEnum):
    UNSYNCED = "unsynced"
    PENDING = "pending"
    SYNCED = "synced"
    ERROR = "error"
