"""
epistats/types.py

Immutable data model shared by the decoder, aggregation, catalog,
statistics and comparison layers.

Every series is a tuple of :class:`TimeSeriesPoint` ordered ascending by
date with unique dates. Values are cumulative running totals as reported
by the provider unless a field name says otherwise.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import NamedTuple, Tuple


class SeriesKind:
    CASES = "cases"
    DEATHS = "deaths"

    ALL = (CASES, DEATHS)


# ---------------------------------------------------------------------------
# Raw provider records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeriesValue:
    """
    One provider count pair for a single date.

    ``new`` can be negative when the provider corrects earlier figures.
    """

    total: int
    new: int


@dataclass(frozen=True)
class RawRegionRecord:
    """
    Historical-query record for one region, keyed by ``YYYY-MM-DD`` date strings.
    """

    country_name: str
    region_name: str
    case_series: Mapping[str, SeriesValue] | None = None
    death_series: Mapping[str, SeriesValue] | None = None


@dataclass(frozen=True)
class RawSnapshotRecord:
    """
    Single-date snapshot record for one region.
    """

    country_name: str
    region_name: str
    case_snapshot: SeriesValue | None = None
    death_snapshot: SeriesValue | None = None


# ---------------------------------------------------------------------------
# Series and aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: str
    value: int


TimeSeries = Tuple[TimeSeriesPoint, ...]


@dataclass(frozen=True)
class CountryAggregate:
    """
    Country-level sum of every region record sharing ``name``.
    """

    name: str
    case_series: TimeSeries = ()
    death_series: TimeSeries = ()
    total_cases: int = 0
    total_deaths: int = 0
    new_cases: int = 0
    new_deaths: int = 0


@dataclass(frozen=True)
class CatalogEntry:
    """
    One catalog row.

    ``lookup_key`` is passed verbatim back to the pipeline to re-fetch the
    entity. ``region`` is only set for region-level catalogs.
    """

    display_name: str
    lookup_key: str
    region: str | None = None


@dataclass(frozen=True)
class Catalog:
    count: int
    results: tuple[CatalogEntry, ...]


@dataclass(frozen=True)
class EntityDetail:
    """
    Fully assembled per-entity view: the case and death series of one
    country, optionally narrowed to one of its regions.
    """

    id: str
    title: str
    case_series: TimeSeries
    death_series: TimeSeries
    region: str | None = None

    @property
    def latest_case(self) -> TimeSeriesPoint | None:
        return self.case_series[-1] if self.case_series else None

    @property
    def latest_death(self) -> TimeSeriesPoint | None:
        return self.death_series[-1] if self.death_series else None


# ---------------------------------------------------------------------------
# Windowed results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PeriodStatistics:
    """
    Statistics over a filtered series.

    ``average`` uses integer division. ``period_total`` is the sum of
    adjacent differences inside the window, so the first point in the
    window never contributes its own delta.
    """

    minimum: int = 0
    maximum: int = 0
    average: int = 0
    period_total: int = 0


class FilteredSeries(NamedTuple):
    points: TimeSeries
    statistics: PeriodStatistics


@dataclass(frozen=True)
class EntityWindow:
    detail: EntityDetail
    cases: FilteredSeries
    deaths: FilteredSeries


@dataclass(frozen=True)
class ComparisonResult:
    """
    Two entities filtered over the identical date window.
    """

    first: EntityWindow
    second: EntityWindow
    start_date: str
    end_date: str
