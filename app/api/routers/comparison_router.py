"""
app/api/routers/comparison_router.py

Two-country comparison endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_covid_stats_service
from app.api.errors import to_http_exception
from app.schemas.covid_stats import ComparisonResponse, comparison_response
from app.services.covid_stats_service import CovidStatsService
from epistats.errors import EpistatsError

router = APIRouter(tags=["comparison"])


@router.get("/compare", response_model=ComparisonResponse)
async def compare_countries(
    first: str = Query(..., description="First country lookup key"),
    second: str = Query(..., description="Second country lookup key"),
    start: str = Query(..., description="Window start, YYYY-MM-DD"),
    end: str = Query(..., description="Window end, YYYY-MM-DD"),
    service: CovidStatsService = Depends(get_covid_stats_service),
) -> ComparisonResponse:
    """
    Fetch both countries concurrently and filter them over the same window.

    If either fetch fails the whole comparison fails; no partial result
    is returned.
    """

    try:
        result = await service.compare(first, second, start, end)
    except (EpistatsError, ValueError) as exc:
        raise to_http_exception(exc) from exc

    return comparison_response(result.first, result.second, result.start_date, result.end_date)
