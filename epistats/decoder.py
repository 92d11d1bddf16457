"""
epistats/decoder.py

Raw record decoder for provider responses.

The provider answers two query modes with two JSON shapes:

historical (``?country=...&type=cases``)::

    [{"country": "Canada", "region": "Alberta",
      "cases": {"2020-01-22": {"total": 0, "new": 0}, ...}}]

snapshot (``?date=2022-01-01&type=cases``)::

    [{"country": "Canada", "region": "Alberta",
      "cases": {"total": 312345, "new": 4321}}]

A query only returns the series it asked for, so ``cases`` and
``deaths`` are both optional. Unknown keys are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from epistats.errors import DecodeError
from epistats.types import RawRegionRecord, RawSnapshotRecord, SeriesValue


class QueryMode:
    HISTORICAL = "historical"
    SNAPSHOT = "snapshot"


class _CountPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    total: int = Field(ge=0)
    new: int


class _RegionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    country: str
    region: str
    cases: Optional[dict[str, _CountPayload]] = None
    deaths: Optional[dict[str, _CountPayload]] = None


class _SnapshotPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    country: str
    region: str
    cases: Optional[_CountPayload] = None
    deaths: Optional[_CountPayload] = None


_REGION_LIST_ADAPTER = TypeAdapter(list[_RegionPayload])
_SNAPSHOT_LIST_ADAPTER = TypeAdapter(list[_SnapshotPayload])

Payload = Union[bytes, bytearray, str]


def _to_value(count: _CountPayload) -> SeriesValue:
    return SeriesValue(total=count.total, new=count.new)


def _to_series(series: dict[str, _CountPayload] | None) -> Mapping[str, SeriesValue] | None:
    if series is None:
        return None
    return MappingProxyType({day: _to_value(count) for day, count in series.items()})


def _validation_failure(mode: str, exc: ValidationError) -> DecodeError:
    first = exc.errors()[0] if exc.error_count() else {}
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return DecodeError(
        f"{mode} payload does not match the provider shape "
        f"({exc.error_count()} error(s), first at {location}: {first.get('msg', 'invalid')})",
        mode=mode,
        error_count=exc.error_count(),
    )


def decode_historical(payload: Payload) -> list[RawRegionRecord]:
    """
    Decode a historical-query response into one record per region.

    Raises
    ------
    DecodeError
        The payload is not JSON or not a list of region objects.
    """

    try:
        rows = _REGION_LIST_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise _validation_failure(QueryMode.HISTORICAL, exc) from exc

    return [
        RawRegionRecord(
            country_name=row.country,
            region_name=row.region,
            case_series=_to_series(row.cases),
            death_series=_to_series(row.deaths),
        )
        for row in rows
    ]


def decode_snapshot(payload: Payload) -> list[RawSnapshotRecord]:
    """
    Decode a snapshot-by-date response into one record per region.

    Raises
    ------
    DecodeError
        The payload is not JSON or not a list of snapshot objects.
    """

    try:
        rows = _SNAPSHOT_LIST_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise _validation_failure(QueryMode.SNAPSHOT, exc) from exc

    return [
        RawSnapshotRecord(
            country_name=row.country,
            region_name=row.region,
            case_snapshot=_to_value(row.cases) if row.cases is not None else None,
            death_snapshot=_to_value(row.deaths) if row.deaths is not None else None,
        )
        for row in rows
    ]


def decode_records(payload: Payload, mode: str) -> list[RawRegionRecord] | list[RawSnapshotRecord]:
    """Decode ``payload`` using the record shape that matches ``mode``."""

    if mode == QueryMode.HISTORICAL:
        return decode_historical(payload)
    if mode == QueryMode.SNAPSHOT:
        return decode_snapshot(payload)
    raise ValueError(f"Unsupported query mode '{mode}'.")
