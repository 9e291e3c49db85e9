"""Platform-specific paths for user data.

Goal: keep the card library and saved sessions out of the install folder.

We intentionally avoid extra dependencies (e.g. platformdirs) and rely on
standard environment variables.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "YOGAPLAN_DATA_DIR"
STORAGE_FILENAME = "storage.json"


def is_windows() -> bool:
    return os.name == "nt"


def is_frozen() -> bool:
    # PyInstaller sets sys.frozen; other freezers may too.
    return bool(getattr(sys, "frozen", False))


def get_user_data_dir(app_name: str = "YogaPlan") -> Path:
    """Return a persistent per-user data directory.

    ``YOGAPLAN_DATA_DIR`` wins when set.
    Windows: %APPDATA%\\YogaPlan, elsewhere ~/.yogaplan
    """
    override = os.getenv(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if is_windows():
        base = os.getenv("APPDATA")
        if base:
            return Path(base) / app_name
        return Path.home() / "AppData" / "Roaming" / app_name

    return Path.home() / f".{app_name.lower()}"


def get_storage_path(data_dir: Path | str | None = None) -> Path:
    """Location of the key-value file holding every collection."""
    base = Path(data_dir) if data_dir else get_user_data_dir()
    return base / STORAGE_FILENAME


def ensure_dir(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
