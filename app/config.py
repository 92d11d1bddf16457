"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


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


def _get_optional_int_env(name: str) -> int | None:
    """
    Read an optional integer; unset, empty or malformed values yield None.
    """

    _load_env_once()
    raw_value = (os.getenv(name) or "").strip()
    if not raw_value:
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


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


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for the statistics provider connector.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


DEFAULT_COVID_API_BASE_URL = "https://api.api-ninjas.com/v1/covid19"
DEFAULT_COUNTRY = "Canada"


@dataclass(frozen=True)
class CovidAPISettings:
    """
    Statistics provider (API Ninjas COVID-19 endpoint) settings.

    ``catalog_limit`` caps catalog responses when the caller passes no
    explicit limit; ``None`` means uncapped.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_COVID_API_BASE_URL
    default_country: str = DEFAULT_COUNTRY
    catalog_limit: int | None = None


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_covid_api_settings() -> CovidAPISettings:
    """
    Return statistics provider settings from environment variables.
    """

    catalog_limit = _get_optional_int_env("COVID_CATALOG_LIMIT")
    return CovidAPISettings(
        api_key=_get_optional_str_env("COVID_API_KEY"),
        base_url=_get_str_env("COVID_API_BASE_URL", DEFAULT_COVID_API_BASE_URL),
        default_country=_get_str_env("COVID_DEFAULT_COUNTRY", DEFAULT_COUNTRY),
        catalog_limit=max(0, catalog_limit) if catalog_limit is not None else None,
    )
