"""Location of the local entity database."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

DATABASE_FILENAME: Final[str] = "labelsync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_data_dir() -> Path:
    """``LABELSYNC_DATA_DIR``, else ``labelsync`` under ``XDG_DATA_HOME`` or ``~/.local/share``."""

    configured = optional_env_var("LABELSYNC_DATA_DIR")
    if configured:
        return Path(configured).expanduser().resolve()
    xdg_home = optional_env_var("XDG_DATA_HOME")
    root = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return (root / "labelsync").expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    """Use ``DATABASE_URI`` as is, or a SQLite file in the data directory.

    The data directory is created when the SQLite default is chosen.
    """

    uri = optional_env_var("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir / DATABASE_FILENAME}")
