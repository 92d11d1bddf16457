"""
epistats/aggregation.py

Region → country aggregation engine.

Records are grouped by exact ``country_name`` (no case or diacritic
normalization; an empty name forms its own group). Each group is reduced
with :func:`functools.reduce` over immutable accumulators, producing an
immutable mapping from country name to accumulator, which is then
converted into :class:`~epistats.types.CountryAggregate` values.

Series merge semantics
----------------------
Region series are summed date by date. A date missing from one region
contributes zero from that region, so the merged series holds the union
of all dates. Sorting happens once, after every region is folded in,
which makes the result independent of record order. Dates are ordered as
calendar dates; entries whose key is not a valid ``YYYY-MM-DD`` date are
dropped before merging and never count as the latest entry.

Totals
------
Snapshot mode sums each record's ``total`` and ``new`` fields.
Historical mode sums, per region, the ``total``/``new`` pair of that
region's latest dated entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from functools import reduce
from itertools import groupby
from operator import attrgetter
from types import MappingProxyType
from typing import TypeVar, Union

from epistats.errors import EmptyResultError
from epistats.statistics import parse_calendar_date
from epistats.types import (
    CountryAggregate,
    EntityDetail,
    RawRegionRecord,
    RawSnapshotRecord,
    SeriesValue,
    TimeSeries,
    TimeSeriesPoint,
)

logger = logging.getLogger(__name__)

_EMPTY_VALUES: Mapping[str, int] = MappingProxyType({})

RecordT = TypeVar("RecordT", RawRegionRecord, RawSnapshotRecord)


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _CountryAccumulator:
    total_cases: int = 0
    total_deaths: int = 0
    new_cases: int = 0
    new_deaths: int = 0
    case_values: Mapping[str, int] = field(default_factory=lambda: _EMPTY_VALUES)
    death_values: Mapping[str, int] = field(default_factory=lambda: _EMPTY_VALUES)

    def combine(self, other: "_CountryAccumulator") -> "_CountryAccumulator":
        return _CountryAccumulator(
            total_cases=self.total_cases + other.total_cases,
            total_deaths=self.total_deaths + other.total_deaths,
            new_cases=self.new_cases + other.new_cases,
            new_deaths=self.new_deaths + other.new_deaths,
            case_values=_add_values(self.case_values, other.case_values),
            death_values=_add_values(self.death_values, other.death_values),
        )

    def to_aggregate(self, name: str) -> CountryAggregate:
        return CountryAggregate(
            name=name,
            case_series=_to_time_series(self.case_values),
            death_series=_to_time_series(self.death_values),
            total_cases=self.total_cases,
            total_deaths=self.total_deaths,
            new_cases=self.new_cases,
            new_deaths=self.new_deaths,
        )


def _add_values(left: Mapping[str, int], right: Mapping[str, int]) -> Mapping[str, int]:
    if not right:
        return left
    if not left:
        return right
    return MappingProxyType(
        {day: left.get(day, 0) + right.get(day, 0) for day in left.keys() | right.keys()}
    )


def _calendar_key(day: str) -> date:
    return parse_calendar_date(day) or date.min


def _to_time_series(values: Mapping[str, int]) -> TimeSeries:
    dated = [day for day in values if parse_calendar_date(day) is not None]
    return tuple(TimeSeriesPoint(date=day, value=values[day]) for day in sorted(dated, key=_calendar_key))


def _dated_entries(series: Mapping[str, SeriesValue] | None) -> Mapping[str, SeriesValue]:
    if not series:
        return _EMPTY_VALUES
    dated = {day: value for day, value in series.items() if parse_calendar_date(day) is not None}
    if len(dated) != len(series):
        logger.debug("Dropped %d undated series entries", len(series) - len(dated))
    return MappingProxyType(dated)


def _latest(series: Mapping[str, SeriesValue]) -> SeriesValue | None:
    if not series:
        return None
    return series[max(series, key=_calendar_key)]


def _totals_only(series: Mapping[str, SeriesValue]) -> Mapping[str, int]:
    if not series:
        return _EMPTY_VALUES
    return MappingProxyType({day: value.total for day, value in series.items()})


def _from_region(record: RawRegionRecord) -> _CountryAccumulator:
    case_series = _dated_entries(record.case_series)
    death_series = _dated_entries(record.death_series)
    latest_cases = _latest(case_series)
    latest_deaths = _latest(death_series)
    return _CountryAccumulator(
        total_cases=latest_cases.total if latest_cases else 0,
        total_deaths=latest_deaths.total if latest_deaths else 0,
        new_cases=latest_cases.new if latest_cases else 0,
        new_deaths=latest_deaths.new if latest_deaths else 0,
        case_values=_totals_only(case_series),
        death_values=_totals_only(death_series),
    )


def _from_snapshot(record: RawSnapshotRecord) -> _CountryAccumulator:
    cases = record.case_snapshot
    deaths = record.death_snapshot
    return _CountryAccumulator(
        total_cases=cases.total if cases else 0,
        total_deaths=deaths.total if deaths else 0,
        new_cases=cases.new if cases else 0,
        new_deaths=deaths.new if deaths else 0,
    )


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------


def _group_by_country(records: Iterable[RecordT]) -> Mapping[str, tuple[RecordT, ...]]:
    by_country = attrgetter("country_name")
    return MappingProxyType(
        {
            country: tuple(group)
            for country, group in groupby(sorted(records, key=by_country), key=by_country)
        }
    )


def _fold(
    groups: Mapping[str, tuple[RecordT, ...]],
    lift: Callable[[RecordT], _CountryAccumulator],
) -> Mapping[str, _CountryAccumulator]:
    return MappingProxyType(
        {
            country: reduce(
                _CountryAccumulator.combine,
                (lift(record) for record in group),
                _CountryAccumulator(),
            )
            for country, group in groups.items()
        }
    )


def _to_aggregates(folded: Mapping[str, _CountryAccumulator]) -> list[CountryAggregate]:
    return [folded[name].to_aggregate(name) for name in sorted(folded)]


def aggregate_regions(records: Iterable[RawRegionRecord]) -> list[CountryAggregate]:
    """
    Aggregate historical region records into one aggregate per country.

    The returned list is sorted by country name.
    """

    aggregates = _to_aggregates(_fold(_group_by_country(records), _from_region))
    logger.debug("aggregate_regions → %d countries", len(aggregates))
    return aggregates


def aggregate_snapshots(records: Iterable[RawSnapshotRecord]) -> list[CountryAggregate]:
    """
    Aggregate snapshot records into one aggregate per country.

    Snapshot aggregates carry totals and new values only; their series are empty.
    """

    aggregates = _to_aggregates(_fold(_group_by_country(records), _from_snapshot))
    logger.debug("aggregate_snapshots → %d countries", len(aggregates))
    return aggregates


def aggregate_records(
    records: Iterable[Union[RawRegionRecord, RawSnapshotRecord]],
) -> list[CountryAggregate]:
    """
    Aggregate a homogeneous batch of raw records of either shape.
    """

    materialized = list(records)
    if all(isinstance(record, RawSnapshotRecord) for record in materialized):
        return aggregate_snapshots(materialized)  # type: ignore[arg-type]
    if all(isinstance(record, RawRegionRecord) for record in materialized):
        return aggregate_regions(materialized)  # type: ignore[arg-type]
    raise TypeError("Cannot aggregate a mix of region and snapshot records.")


def merge_series(series_maps: Iterable[Mapping[str, int]]) -> TimeSeries:
    """
    Sum date-keyed value maps into one ascending series over the union of dates.
    """

    frozen_maps = (MappingProxyType(dict(values)) for values in series_maps)
    merged = reduce(_add_values, frozen_maps, _EMPTY_VALUES)
    return _to_time_series(merged)


# ---------------------------------------------------------------------------
# Entity detail
# ---------------------------------------------------------------------------


def build_entity_detail(
    records: Iterable[RawRegionRecord],
    *,
    lookup_key: str | None = None,
    region: str | None = None,
) -> EntityDetail:
    """
    Assemble the detail view of one entity from historical records.

    Cases and deaths may arrive as separate records (one per provider
    query); they are merged like any other region contribution.

    Parameters
    ----------
    records:
        Decoded historical records, typically the cases and deaths
        responses for the same lookup key.
    lookup_key:
        Entity identifier. Records whose country name equals it are
        selected; when none does, the records must resolve to exactly one
        country (the provider already resolved the key, e.g. ``canada``
        → ``Canada``).
    region:
        Optional exact region name narrowing the records before aggregation.

    Raises
    ------
    EmptyResultError
        No record matches the lookup key / region, or several countries
        remain and no lookup key disambiguates them.
    """

    selected = [record for record in records if region is None or record.region_name == region]
    if lookup_key is not None:
        exact = [record for record in selected if record.country_name == lookup_key]
        if exact:
            selected = exact
    aggregates = aggregate_regions(selected)

    if not aggregates:
        raise EmptyResultError(
            f"No data found for {lookup_key or '<any country>'}"
            + (f" / region {region!r}" if region is not None else "")
            + ".",
            lookup_key=lookup_key,
        )
    if len(aggregates) > 1:
        names = ", ".join(aggregate.name for aggregate in aggregates)
        raise EmptyResultError(
            f"Records resolve to several countries ({names}) and none is named {lookup_key!r}.",
            lookup_key=lookup_key,
        )

    aggregate = aggregates[0]
    return EntityDetail(
        id=lookup_key if lookup_key is not None else aggregate.name,
        title=aggregate.name,
        case_series=aggregate.case_series,
        death_series=aggregate.death_series,
        region=region,
    )
