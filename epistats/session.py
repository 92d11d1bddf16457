"""
epistats/session.py

Guarded query entry points for one user's view.

A session owns one :class:`~epistats.concurrency.LatestQueryGuard` per
channel. Issuing a new query on a channel cancels the in-flight query on
that same channel; channels do not affect each other, so loading a
catalog never cancels a detail view.
"""

from __future__ import annotations

from epistats.comparison import ComparisonEngine
from epistats.concurrency import LatestQueryGuard
from epistats.pipeline import EntityPipeline
from epistats.types import Catalog, ComparisonResult, CountryAggregate, EntityDetail


class QuerySession:
    CATALOG = "catalog"
    REGIONS = "regions"
    DETAIL = "detail"
    COMPARISON = "comparison"

    def __init__(self, pipeline: EntityPipeline, engine: ComparisonEngine | None = None) -> None:
        self._pipeline = pipeline
        self._engine = engine or ComparisonEngine(pipeline)
        self._guards = {
            channel: LatestQueryGuard(channel)
            for channel in (self.CATALOG, self.REGIONS, self.DETAIL, self.COMPARISON)
        }

    def guard(self, channel: str) -> LatestQueryGuard:
        return self._guards[channel]

    async def load_catalog(
        self,
        date: str,
        *,
        limit: int | None = None,
        country: str | None = None,
    ) -> tuple[Catalog, list[CountryAggregate]]:
        return await self._guards[self.CATALOG].run(
            self._pipeline.load_catalog(date, limit=limit, country=country)
        )

    async def load_regions(self, country: str, *, limit: int | None = None) -> Catalog:
        return await self._guards[self.REGIONS].run(self._pipeline.load_regions(country, limit=limit))

    async def load_detail(self, lookup_key: str, *, region: str | None = None) -> EntityDetail:
        return await self._guards[self.DETAIL].run(self._pipeline.load_detail(lookup_key, region=region))

    async def compare(
        self,
        first_key: str,
        second_key: str,
        start_date: str,
        end_date: str,
    ) -> ComparisonResult:
        return await self._guards[self.COMPARISON].run(
            self._engine.compare(first_key, second_key, start_date, end_date)
        )
