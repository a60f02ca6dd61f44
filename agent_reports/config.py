"""
agent_reports/config.py

Environment-driven client configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


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
    Ensure project `.env` files are loaded once before reading settings.
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


@dataclass(frozen=True)
class ReportingAPISettings:
    """
    Connection and timeout settings for the remote reporting API.

    Metadata and query calls use the short timeout class; file-bearing
    compare calls and binary downloads use the long one.
    """

    base_url: str = "http://127.0.0.1:8000"
    query_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 30.0
    compare_timeout_seconds: float = 60.0
    activity_timeout_seconds: float = 60.0
    download_timeout_seconds: float = 60.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    max_upload_files: int = 5


@dataclass(frozen=True)
class ClientRuntimeSettings:
    """
    Local runtime settings for entrypoints (CLI and Streamlit).
    """

    download_dir: str = "downloads"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_reporting_api_settings() -> ReportingAPISettings:
    """
    Return cached reporting API settings from environment variables.
    """

    return ReportingAPISettings(
        base_url=_get_str_env("REPORTING_API_BASE_URL", "http://127.0.0.1:8000").rstrip("/"),
        query_timeout_seconds=max(1.0, _get_float_env("REPORTING_QUERY_TIMEOUT_SECONDS", 30.0)),
        upload_timeout_seconds=max(1.0, _get_float_env("REPORTING_UPLOAD_TIMEOUT_SECONDS", 30.0)),
        compare_timeout_seconds=max(1.0, _get_float_env("REPORTING_COMPARE_TIMEOUT_SECONDS", 60.0)),
        activity_timeout_seconds=max(1.0, _get_float_env("REPORTING_ACTIVITY_TIMEOUT_SECONDS", 60.0)),
        download_timeout_seconds=max(1.0, _get_float_env("REPORTING_DOWNLOAD_TIMEOUT_SECONDS", 60.0)),
        max_retries=max(0, _get_int_env("REPORTING_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("REPORTING_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("REPORTING_BACKOFF_MULTIPLIER", 2.0)),
        max_upload_files=max(1, _get_int_env("REPORTING_MAX_UPLOAD_FILES", 5)),
    )


@lru_cache(maxsize=1)
def get_client_runtime_settings() -> ClientRuntimeSettings:
    """
    Return cached runtime settings from environment variables.
    """

    return ClientRuntimeSettings(
        download_dir=_get_str_env("REPORTING_DOWNLOAD_DIR", "downloads"),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
