"""Location of the correlation database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATA_DIR_ENV: Final[str] = "CIVISYNC_DATA_DIR"
DEFAULT_DATA_DIR: Final[Path] = Path("~/.civisync")
DEFAULT_DB_FILENAME: Final[str] = "civisync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def sqlite_database_path() -> Path:
    """The SQLite file used when no database URI is configured."""

    data_dir = os.getenv(DATA_DIR_ENV)
    base = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
    return base.expanduser().resolve() / DEFAULT_DB_FILENAME


def get_database_config() -> DatabaseConfig:
    uri = os.getenv(DATABASE_URI_ENV)
    if uri:
        return DatabaseConfig(uri=uri)
    path = sqlite_database_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
