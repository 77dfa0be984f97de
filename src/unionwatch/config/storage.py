"""Where union records live: the remote database or a local SQLite file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal

from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "unionwatch"
DEFAULT_DB_FILENAME: Final[str] = "unionwatch.db"

StoreBackend = Literal["firebase", "sqlite"]
_BACKENDS: Final[tuple[StoreBackend, ...]] = ("firebase", "sqlite")


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local data directory; created on first access to the database path."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_path(self) -> Path:
        directory = self.data_dir.expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv("UNIONWATCH_DATA_DIR")
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())


def get_store_backend() -> StoreBackend:
    value = (os.getenv("UNIONWATCH_STORE") or "firebase").strip().lower()
    for backend in _BACKENDS:
        if value == backend:
            return backend
    raise ConfigurationError(
        f"Unsupported UNIONWATCH_STORE backend: {value!r} (expected one of {', '.join(_BACKENDS)})"
    )
