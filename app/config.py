"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from revision_diff.formatter import DEFAULT_DATE_FORMAT

DEFAULT_API_BASE_URL = "http://localhost:5000"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
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


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


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


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name, falling back to UTC when unknown.
    """

    if name.strip().upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


@dataclass(frozen=True)
class WBESAPISettings:
    """
    Connection settings for the WBES REST backend.
    """

    base_url: str = DEFAULT_API_BASE_URL
    api_token: str | None = None
    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for dashboard aggregation.
    """

    fanout_max_workers: int = 8
    timezone_name: str = "UTC"

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)


@dataclass(frozen=True)
class DiffDisplaySettings:
    """
    Display settings for revision comparison rendering.
    """

    date_format: str = DEFAULT_DATE_FORMAT


@lru_cache(maxsize=1)
def get_wbes_api_settings() -> WBESAPISettings:
    """
    Return cached WBES backend settings from environment variables.
    """

    return WBESAPISettings(
        base_url=_get_str_env("WBES_API_BASE_URL", DEFAULT_API_BASE_URL),
        api_token=_get_optional_str_env("WBES_API_TOKEN"),
        timeout_seconds=max(1.0, _get_float_env("WBES_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("WBES_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("WBES_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("WBES_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard aggregation settings.
    """

    return DashboardSettings(
        fanout_max_workers=max(1, _get_int_env("DASHBOARD_FANOUT_MAX_WORKERS", 8)),
        timezone_name=_get_str_env("DASHBOARD_TIMEZONE", "UTC"),
    )


@lru_cache(maxsize=1)
def get_diff_display_settings() -> DiffDisplaySettings:
    """
    Return cached revision comparison display settings.
    """

    return DiffDisplaySettings(
        date_format=_get_str_env("DIFF_DATE_FORMAT", DEFAULT_DATE_FORMAT),
    )
