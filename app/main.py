from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.services.covid_stats_service import CovidStatsService, create_default_covid_stats_service


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - COVID_API_KEY is required; the provider rejects anonymous calls.
    - COVID_CATALOG_LIMIT, when set, must be a non-negative integer.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Provider API key -----------------------------------------------
    if not os.getenv("COVID_API_KEY", "").strip():
        errors.append(
            "COVID_API_KEY is not set. Provide the statistics provider API key. "
            "Empty strings are not permitted."
        )

    # --- Catalog limit --------------------------------------------------
    catalog_limit = os.getenv("COVID_CATALOG_LIMIT", "").strip()
    if catalog_limit and (not catalog_limit.isdigit()):
        errors.append(
            f"COVID_CATALOG_LIMIT='{catalog_limit}' is not valid. Use a non-negative integer or leave it unset."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed. Missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app(
    *,
    service: CovidStatsService | None = None,
    validate_env: bool = True,
    lifespan=_lifespan,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Each application instance owns one query service, and with it one
    last-query-wins session per channel. Tests inject a service over a fake
    provider and pass ``validate_env=False`` and ``lifespan=None``.
    """

    if validate_env:
        _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Epistats API",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.state.covid_stats_service = service or create_default_covid_stats_service()

    from app.api.routers import (
        catalog_router,
        comparison_router,
        countries_router,
        preferences_router,
    )

    application.include_router(catalog_router)
    application.include_router(countries_router)
    application.include_router(comparison_router)
    application.include_router(preferences_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
