"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SQLITE_FILENAME = "epistats.db"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
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


def default_sqlite_url() -> str:
    return f"sqlite:///{PROJECT_ROOT / DEFAULT_SQLITE_FILENAME}"


def resolve_database_url() -> str:
    """
    Resolve the preference-store database URL.

    Priority:
    1) DATABASE_URL
    2) LOCAL_DATABASE_URL
    3) SQLite file next to the project (single-user, client-side store)
    """

    load_env_files()

    for name in ("DATABASE_URL", "LOCAL_DATABASE_URL"):
        url = (os.getenv(name) or "").strip()
        if url:
            return url
    return default_sqlite_url()
