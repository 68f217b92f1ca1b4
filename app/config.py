"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files(project_root: Path = _PROJECT_ROOT) -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class KPISettings:
    """
    Runtime policy for the call-center KPI service.

    ``strict_inputs`` rejects negative or non-finite aggregates instead of
    letting them flow through the formulas.
    """

    strict_inputs: bool = False
    log_guard_events: bool = True


@dataclass(frozen=True)
class ApiSettings:
    """
    HTTP application settings.
    """

    title: str = "Call Center KPI API"
    version: str = "1.0.0"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_kpi_settings() -> KPISettings:
    """
    Return cached KPI service settings from environment variables.
    """

    return KPISettings(
        strict_inputs=_get_bool_env("KPI_STRICT_INPUTS", False),
        log_guard_events=_get_bool_env("KPI_LOG_GUARD_EVENTS", True),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> ApiSettings:
    """
    Return cached HTTP application settings from environment variables.
    """

    return ApiSettings(
        title=_get_str_env("API_TITLE", "Call Center KPI API"),
        version=_get_str_env("API_VERSION", "1.0.0"),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
