# src/wormhole_scheduler/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole process.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "WORMHOLE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Scheduler ----
    tick_seconds: float
    isolate_errors: bool

    # ---- Logging ----
    log_level: str
    log_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        tick_seconds = _env_float(_k("TICK_SECONDS"), 1.0)
        if tick_seconds <= 0:
            tick_seconds = 1.0

        return Settings(
            tick_seconds=tick_seconds,
            isolate_errors=_env_bool(_k("ISOLATE_ERRORS"), True),
            log_level=_env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO",
            log_dir=_env_path(_k("LOG_DIR"), Path(".local/wormhole")),
        )


@functools.cache
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings.from_env()
