"""
epistats/pipeline.py

Per-entity fetch → decode → aggregate pipeline.

The pipeline never builds URLs or headers; it asks a :class:`StatsProvider`
for raw response bytes. Providers are synchronous (``requests``-based), so
each fetch runs in a worker thread via :func:`asyncio.to_thread`. Decoding
happens inside the same sub-task, which lets a malformed response fail
its sibling fetch fast. Aggregation and catalog building are pure and run
after the join.

Cancelling a pipeline call cancels its sub-tasks. A worker thread that is
already blocked in an HTTP call runs to completion, but its result is
discarded.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

from epistats.aggregation import aggregate_snapshots, build_entity_detail
from epistats.catalog import build_catalog, build_region_catalog
from epistats.concurrency import gather_fail_fast
from epistats.decoder import decode_historical, decode_snapshot
from epistats.errors import InvalidDateWindowError
from epistats.logging_utils import elapsed_ms, log_event
from epistats.statistics import parse_calendar_date
from epistats.types import (
    Catalog,
    CountryAggregate,
    EntityDetail,
    RawRegionRecord,
    RawSnapshotRecord,
    SeriesKind,
)

logger = logging.getLogger(__name__)


class StatsProvider(Protocol):
    """
    Transport collaborator returning raw provider response bodies.

    Implementations signal transport failures with
    :class:`~epistats.errors.ProviderUnavailableError` (or a subclass).
    """

    def fetch_historical(self, *, country: str, kind: str, region: str | None = None) -> bytes:
        ...

    def fetch_snapshot(self, *, date: str, kind: str, country: str | None = None) -> bytes:
        ...


class EntityPipeline:
    """
    Stateless query pipeline over one provider.

    Safe to share between concurrent invocations: every call works on its
    own freshly decoded records.
    """

    def __init__(self, provider: StatsProvider) -> None:
        self._provider = provider

    # ------------------------------------------------------------------
    # Sub-fetches
    # ------------------------------------------------------------------

    async def _historical(self, country: str, kind: str, region: str | None) -> list[RawRegionRecord]:
        payload = await asyncio.to_thread(
            self._provider.fetch_historical,
            country=country,
            kind=kind,
            region=region,
        )
        return decode_historical(payload)

    async def _snapshot(self, date: str, kind: str, country: str | None) -> list[RawSnapshotRecord]:
        payload = await asyncio.to_thread(
            self._provider.fetch_snapshot,
            date=date,
            kind=kind,
            country=country,
        )
        return decode_snapshot(payload)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load_detail(self, lookup_key: str, *, region: str | None = None) -> EntityDetail:
        """
        Fetch cases and deaths concurrently and assemble the entity detail.

        Raises
        ------
        DecodeError
            Either response is malformed.
        EmptyResultError
            The provider returned no data for ``lookup_key`` / ``region``.
        ProviderUnavailableError
            The transport collaborator gave up.
        """

        started = time.monotonic()
        cases, deaths = await gather_fail_fast(
            self._historical(lookup_key, SeriesKind.CASES, region),
            self._historical(lookup_key, SeriesKind.DEATHS, region),
        )
        detail = build_entity_detail([*cases, *deaths], lookup_key=lookup_key, region=region)
        log_event(
            logger,
            logging.INFO,
            "entity_detail_loaded",
            lookup_key=lookup_key,
            region=region,
            case_points=len(detail.case_series),
            death_points=len(detail.death_series),
            duration_ms=elapsed_ms(started),
        )
        return detail

    async def load_catalog(
        self,
        date: str,
        *,
        limit: int | None = None,
        country: str | None = None,
    ) -> tuple[Catalog, list[CountryAggregate]]:
        """
        Fetch the case and death snapshots for ``date`` and build the
        country catalog.

        Returns the catalog together with the aggregates it was built from,
        so callers can show per-country totals next to each entry. An empty
        provider answer yields an empty catalog, not an error.
        """

        if parse_calendar_date(date) is None:
            raise InvalidDateWindowError(f"date must be a YYYY-MM-DD calendar date, got {date!r}.")

        started = time.monotonic()
        cases, deaths = await gather_fail_fast(
            self._snapshot(date, SeriesKind.CASES, country),
            self._snapshot(date, SeriesKind.DEATHS, country),
        )
        aggregates = aggregate_snapshots([*cases, *deaths])
        catalog = build_catalog(aggregates, limit=limit)
        log_event(
            logger,
            logging.INFO,
            "snapshot_catalog_loaded",
            date=date,
            country=country,
            count=catalog.count,
            duration_ms=elapsed_ms(started),
        )
        return catalog, aggregates

    async def load_regions(self, country: str, *, limit: int | None = None) -> Catalog:
        """
        List the regions the provider reports for ``country``.

        Only the cases series is fetched; regions are identical across kinds.
        """

        records = await self._historical(country, SeriesKind.CASES, None)
        return build_region_catalog(records, limit=limit)
