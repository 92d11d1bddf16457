"""
app/api/routers/catalog_router.py

Snapshot catalog endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import get_covid_stats_service, get_limit
from app.api.errors import to_http_exception
from app.schemas.covid_stats import CatalogResponse, catalog_response
from app.services.covid_stats_service import CovidStatsService
from db.session import get_db
from epistats.errors import EpistatsError

router = APIRouter(tags=["catalog"])


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(
    date: str = Query(..., description="Snapshot date, YYYY-MM-DD"),
    country: str | None = Query(default=None, description="Optional country search"),
    limit: int | None = Depends(get_limit),
    db: Session = Depends(get_db),
    service: CovidStatsService = Depends(get_covid_stats_service),
) -> CatalogResponse:
    """
    List countries reporting on ``date`` with their totals and new values.
    """

    try:
        catalog, aggregates = await service.get_catalog(db, date=date, limit=limit, country=country)
    except (EpistatsError, ValueError) as exc:
        raise to_http_exception(exc) from exc

    return catalog_response(catalog, aggregates)
