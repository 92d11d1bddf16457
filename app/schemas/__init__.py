"""
app/schemas package marker.
"""

from app.schemas.covid_stats import (
    CatalogEntryResponse,
    CatalogResponse,
    ComparisonEntityResponse,
    ComparisonResponse,
    EntityDetailResponse,
    EntityWindowResponse,
    FilteredSeriesResponse,
    LastCountryResponse,
    PeriodStatisticsResponse,
    TimeSeriesPointResponse,
)

__all__ = [
    "CatalogEntryResponse",
    "CatalogResponse",
    "ComparisonEntityResponse",
    "ComparisonResponse",
    "EntityDetailResponse",
    "EntityWindowResponse",
    "FilteredSeriesResponse",
    "LastCountryResponse",
    "PeriodStatisticsResponse",
    "TimeSeriesPointResponse",
]
