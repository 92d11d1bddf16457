"""
epistats/statistics.py

Date-window filtering and period statistics over cumulative series.

Formulas
--------
minimum / maximum = min / max of the filtered values (0 when empty)
average           = sum(values) // len(values)      (0 when empty)
period_total      = Σ value[i] - value[i-1] for i ≥ 1 within the window

``period_total`` only differences points that are both inside the window,
so the first point in the window contributes nothing of its own. A
provider correction that lowers a cumulative value yields a negative
difference, which is kept as-is.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date

from epistats.errors import InvalidDateWindowError
from epistats.types import FilteredSeries, PeriodStatistics, TimeSeries, TimeSeriesPoint

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: str) -> date | None:
    """
    Parse a zero-padded ``YYYY-MM-DD`` string.

    Returns ``None`` for anything else, including impossible dates such as
    ``2021-02-30``.
    """

    if not isinstance(value, str) or not _ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _require_bound(name: str, value: str) -> date:
    parsed = parse_calendar_date(value)
    if parsed is None:
        raise InvalidDateWindowError(f"{name} must be a YYYY-MM-DD calendar date, got {value!r}.")
    return parsed


def validate_window(start_date: str, end_date: str) -> tuple[date, date]:
    """
    Parse both window bounds.

    Raises
    ------
    InvalidDateWindowError
        Either bound is not a valid ``YYYY-MM-DD`` date.
    """

    return _require_bound("start_date", start_date), _require_bound("end_date", end_date)


def compute_period_statistics(points: Sequence[TimeSeriesPoint]) -> PeriodStatistics:
    """
    Compute statistics over an already filtered, ascending series.
    """

    if not points:
        return PeriodStatistics()

    values = [point.value for point in points]
    period_total = sum(current - previous for previous, current in zip(values, values[1:]))
    return PeriodStatistics(
        minimum=min(values),
        maximum=max(values),
        average=sum(values) // len(values),
        period_total=period_total,
    )


def filter_series(series: Sequence[TimeSeriesPoint], start_date: str, end_date: str) -> FilteredSeries:
    """
    Keep the points whose date lies in ``[start_date, end_date]`` and
    compute their statistics.

    Points with unparsable dates are skipped. An inverted window
    (``start_date > end_date``) is valid and yields an empty result.

    Returns
    -------
    FilteredSeries
        ``(points, statistics)``; unpacks as a plain tuple.
    """

    start, end = validate_window(start_date, end_date)

    in_window: list[tuple[date, TimeSeriesPoint]] = []
    for point in series:
        parsed = parse_calendar_date(point.date)
        if parsed is not None and start <= parsed <= end:
            in_window.append((parsed, point))

    points: TimeSeries = tuple(point for _, point in sorted(in_window, key=lambda item: item[0]))
    return FilteredSeries(points=points, statistics=compute_period_statistics(points))


def latest_point(series: Sequence[TimeSeriesPoint]) -> TimeSeriesPoint | None:
    """Return the most recent point with a valid date, or ``None``."""

    dated = [point for point in series if parse_calendar_date(point.date) is not None]
    if not dated:
        return None
    return max(dated, key=lambda point: point.date)
