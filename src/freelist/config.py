# src/freelist/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole library.
- Nothing is required at import time; every value has a default.
- ":memory:" is accepted as the database path for ephemeral storage.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_store import MEMORY_DB

ENV_PREFIX = "FREELIST"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_db_path(name: str, default: Path) -> str:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return str(default)
    if raw == MEMORY_DB:
        return raw
    return str(Path(raw).expanduser())


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    configure_logging: bool

    # ---- Storage ----
    data_dir: Path
    db_path: str
    strict_timestamps: bool

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/freelist"))
        return Settings(
            app_name=_env(_k("APP_NAME"), "freelist") or "freelist",
            log_level=_env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO",
            configure_logging=_env_bool(_k("CONFIGURE_LOGGING"), False),
            data_dir=data_dir,
            db_path=_env_db_path(_k("DB_PATH"), data_dir / "freelist.db"),
            strict_timestamps=_env_bool(_k("STRICT_TIMESTAMPS"), False),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
