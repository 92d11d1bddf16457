"""
app/api/routers/preferences_router.py

Single-user preference endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_covid_stats_service
from app.schemas.covid_stats import LastCountryResponse
from app.services.covid_stats_service import CovidStatsService
from db.session import get_db

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/last-country", response_model=LastCountryResponse)
def get_last_country(
    db: Session = Depends(get_db),
    service: CovidStatsService = Depends(get_covid_stats_service),
) -> LastCountryResponse:
    return LastCountryResponse(country=service.get_last_country(db))
