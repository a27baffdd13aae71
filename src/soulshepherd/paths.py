from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

APP_NAME = "SoulShepherd"

# Environment override, useful for tests and portable installs
ENV_DATA_DIR = "SOUL_SHEPHERD_DATA_DIR"


def default_data_dir() -> Path:
    """Directory holding the persisted game state.

    SOUL_SHEPHERD_DATA_DIR wins over the platform user data directory.
    """
    override = os.getenv(ENV_DATA_DIR)
    if override:
        return Path(override).expanduser().resolve()
    return Path(user_data_dir(appname=APP_NAME, appauthor=False)).expanduser().resolve()


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
