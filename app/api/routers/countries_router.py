"""
app/api/routers/countries_router.py

Per-country region listing and detail endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import get_covid_stats_service, get_limit
from app.api.errors import to_http_exception
from app.schemas.covid_stats import (
    CatalogResponse,
    EntityDetailResponse,
    catalog_response,
    entity_detail_response,
)
from app.services.covid_stats_service import CovidStatsService
from db.session import get_db
from epistats.errors import EpistatsError

router = APIRouter(prefix="/countries", tags=["countries"])


@router.get("/{country}/regions", response_model=CatalogResponse)
async def list_regions(
    country: str,
    limit: int | None = Depends(get_limit),
    service: CovidStatsService = Depends(get_covid_stats_service),
) -> CatalogResponse:
    try:
        catalog = await service.get_regions(country, limit=limit)
    except (EpistatsError, ValueError) as exc:
        raise to_http_exception(exc) from exc

    return catalog_response(catalog)


@router.get("/{country}", response_model=EntityDetailResponse)
async def get_country_detail(
    country: str,
    region: str | None = Query(default=None, description="Narrow the detail to one region"),
    start: str | None = Query(default=None, description="Window start, YYYY-MM-DD"),
    end: str | None = Query(default=None, description="Window end, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    service: CovidStatsService = Depends(get_covid_stats_service),
) -> EntityDetailResponse:
    """
    Return the full case and death series of one country (or region).

    When both ``start`` and ``end`` are given the response also carries
    the windowed series and their statistics.
    """

    try:
        detail, window = await service.get_detail(
            db,
            country,
            region=region,
            start_date=start,
            end_date=end,
        )
    except (EpistatsError, ValueError) as exc:
        raise to_http_exception(exc) from exc

    return entity_detail_response(detail, window, start_date=start, end_date=end)
