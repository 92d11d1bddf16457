"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import HTTPException, Query, Request, status

from app.services.covid_stats_service import CovidStatsService


def get_limit(
    limit: int | None = Query(default=None, description="Maximum number of catalog entries"),
) -> int | None:
    """
    Reject negative result caps before any upstream call is made.
    """

    if limit is not None and limit < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="limit must be zero or a positive integer.",
        )
    return limit


def get_covid_stats_service(request: Request) -> CovidStatsService:
    """
    Return the query service owned by this application instance.
    """

    return request.app.state.covid_stats_service
