"""
app/services package marker.
"""

from app.services.covid_stats_service import (
    CovidStatsService,
    build_covid_stats_service,
    create_default_covid_stats_service,
)

__all__ = [
    "CovidStatsService",
    "build_covid_stats_service",
    "create_default_covid_stats_service",
]
