"""Where caseflow keeps its data and which database it talks to."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "caseflow"
DEFAULT_DB_FILENAME: Final[str] = "caseflow.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        path = self.resolve_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def database_path(self, *, ensure: bool = True) -> Path:
        directory = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return directory / self.database_filename

    def database_uri(self) -> str:
        """Local sqlite file in the data directory, created on first use."""

        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    xdg_home = os.getenv("XDG_DATA_HOME")
    root = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    override = os.getenv("CASEFLOW_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` when set, else the sqlite file of ``storage``."""

    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
