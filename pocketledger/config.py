"""Runtime settings for the command line entry points.

Explicit values win; otherwise the storage root and log level come from the
``POCKETLEDGER_PATH`` and ``POCKETLEDGER_LOG_LEVEL`` environment variables.
Only the entry points read the environment: the store and session receive
the resolved root directly.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import StorageUnavailable

STORAGE_ENV = "POCKETLEDGER_PATH"
LOG_LEVEL_ENV = "POCKETLEDGER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FILE_NAME = ".pocketledger.log"


@dataclass(frozen=True)
class Settings:
    storage_root: Path
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def log_file(self) -> Path:
        """File used for log output while the curses session owns the screen."""
        return self.storage_root / LOG_FILE_NAME


def resolve_storage_root(explicit: str | Path | None = None) -> Path:
    root = explicit if explicit else os.getenv(STORAGE_ENV)
    if not root:
        raise StorageUnavailable(
            f"No storage root configured; pass --root or set {STORAGE_ENV}"
        )
    path = Path(root).expanduser()
    if path.exists() and not path.is_dir():
        raise StorageUnavailable(f"Storage root {path} is not a directory")
    return path


def load_settings(
    storage_root: str | Path | None = None, log_level: str | None = None
) -> Settings:
    return Settings(
        storage_root=resolve_storage_root(storage_root),
        log_level=log_level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL,
    )
