"""
app/schemas/covid_stats.py

Response schemas for catalog, detail, comparison and preference endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from epistats.types import (
    Catalog,
    CountryAggregate,
    EntityDetail,
    EntityWindow,
    FilteredSeries,
    TimeSeries,
    TimeSeriesPoint,
)


class TimeSeriesPointResponse(BaseModel):
    date: str
    value: int


class PeriodStatisticsResponse(BaseModel):
    """
    Statistics over one windowed series.

    ``period_total`` can be negative when the provider revised figures down.
    """

    minimum: int
    maximum: int
    average: int
    period_total: int


class FilteredSeriesResponse(BaseModel):
    points: list[TimeSeriesPointResponse]
    statistics: PeriodStatisticsResponse


class CatalogEntryResponse(BaseModel):
    display_name: str
    lookup_key: str
    region: str | None = None
    total_cases: int | None = None
    total_deaths: int | None = None
    new_cases: int | None = None
    new_deaths: int | None = None


class CatalogResponse(BaseModel):
    count: int = Field(..., ge=0)
    results: list[CatalogEntryResponse]


class EntityWindowResponse(BaseModel):
    start_date: str
    end_date: str
    cases: FilteredSeriesResponse
    deaths: FilteredSeriesResponse


class EntityDetailResponse(BaseModel):
    id: str
    title: str
    region: str | None = None
    case_series: list[TimeSeriesPointResponse]
    death_series: list[TimeSeriesPointResponse]
    latest_case: TimeSeriesPointResponse | None = None
    latest_death: TimeSeriesPointResponse | None = None
    window: EntityWindowResponse | None = None


class ComparisonEntityResponse(BaseModel):
    id: str
    title: str
    cases: FilteredSeriesResponse
    deaths: FilteredSeriesResponse


class ComparisonResponse(BaseModel):
    start_date: str
    end_date: str
    first: ComparisonEntityResponse
    second: ComparisonEntityResponse


class LastCountryResponse(BaseModel):
    country: str


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


def _point(point: TimeSeriesPoint | None) -> TimeSeriesPointResponse | None:
    if point is None:
        return None
    return TimeSeriesPointResponse(date=point.date, value=point.value)


def _points(series: TimeSeries) -> list[TimeSeriesPointResponse]:
    return [TimeSeriesPointResponse(date=point.date, value=point.value) for point in series]


def filtered_series_response(filtered: FilteredSeries) -> FilteredSeriesResponse:
    points, statistics = filtered
    return FilteredSeriesResponse(
        points=_points(points),
        statistics=PeriodStatisticsResponse(
            minimum=statistics.minimum,
            maximum=statistics.maximum,
            average=statistics.average,
            period_total=statistics.period_total,
        ),
    )


def catalog_response(catalog: Catalog, aggregates: list[CountryAggregate] | None = None) -> CatalogResponse:
    """
    Attach per-country totals to catalog rows when the aggregates are known.
    """

    by_name = {aggregate.name: aggregate for aggregate in aggregates or ()}
    results: list[CatalogEntryResponse] = []
    for entry in catalog.results:
        aggregate = by_name.get(entry.lookup_key)
        if aggregate is None:
            results.append(
                CatalogEntryResponse(
                    display_name=entry.display_name,
                    lookup_key=entry.lookup_key,
                    region=entry.region,
                )
            )
            continue
        results.append(
            CatalogEntryResponse(
                display_name=entry.display_name,
                lookup_key=entry.lookup_key,
                region=entry.region,
                total_cases=aggregate.total_cases,
                total_deaths=aggregate.total_deaths,
                new_cases=aggregate.new_cases,
                new_deaths=aggregate.new_deaths,
            )
        )
    return CatalogResponse(count=catalog.count, results=results)


def entity_detail_response(
    detail: EntityDetail,
    window: EntityWindow | None = None,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
) -> EntityDetailResponse:
    window_response = None
    if window is not None and start_date is not None and end_date is not None:
        window_response = EntityWindowResponse(
            start_date=start_date,
            end_date=end_date,
            cases=filtered_series_response(window.cases),
            deaths=filtered_series_response(window.deaths),
        )
    return EntityDetailResponse(
        id=detail.id,
        title=detail.title,
        region=detail.region,
        case_series=_points(detail.case_series),
        death_series=_points(detail.death_series),
        latest_case=_point(detail.latest_case),
        latest_death=_point(detail.latest_death),
        window=window_response,
    )


def _comparison_entity(window: EntityWindow) -> ComparisonEntityResponse:
    return ComparisonEntityResponse(
        id=window.detail.id,
        title=window.detail.title,
        cases=filtered_series_response(window.cases),
        deaths=filtered_series_response(window.deaths),
    )


def comparison_response(first: EntityWindow, second: EntityWindow, start_date: str, end_date: str) -> ComparisonResponse:
    return ComparisonResponse(
        start_date=start_date,
        end_date=end_date,
        first=_comparison_entity(first),
        second=_comparison_entity(second),
    )
