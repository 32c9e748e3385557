"""Where certimap keeps its files on disk.

Everything lives under one data directory: the SQLite database holding the snapshot and
its history, and the HTTP response cache shared by the source fetchers. ``DATABASE_URI``
points the snapshot at another database without moving the cache.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "certimap"
DATABASE_FILENAME: Final[str] = "certimap.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_uri_override: str | None = None

    @property
    def database_file(self) -> Path:
        return self.data_dir / DATABASE_FILENAME

    @property
    def http_cache_file(self) -> Path:
        return self.data_dir / HTTP_CACHE_FILENAME

    @property
    def uses_local_database(self) -> bool:
        return self.database_uri_override is None

    @property
    def database_uri(self) -> str:
        if self.database_uri_override is not None:
            return self.database_uri_override
        return f"sqlite+pysqlite:///{self.database_file}"

    def ensure_data_dir(self) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir


def _default_data_dir() -> Path:
    base = os.getenv("XDG_DATA_HOME") or os.getenv("LOCALAPPDATA")
    base_path = Path(base) if base else Path.home() / ".local" / "share"
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    """Read ``CERTIMAP_DATA_DIR`` and ``DATABASE_URI``; blank values count as unset."""

    env_dir = (os.getenv("CERTIMAP_DATA_DIR") or "").strip()
    env_uri = (os.getenv("DATABASE_URI") or "").strip()
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(
        data_dir=data_dir.expanduser().resolve(),
        database_uri_override=env_uri or None,
    )


def get_database_uri() -> str:
    """Database URI for the snapshot, creating the data directory for the default file."""

    config = get_storage_config()
    if config.uses_local_database:
        config.ensure_data_dir()
    return config.database_uri
