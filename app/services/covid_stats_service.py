"""
app/services/covid_stats_service.py

Service facade between the HTTP/CLI surfaces and the epistats core.

Owns the user's :class:`~epistats.session.QuerySession` and the
last-country preference. Everything else (decoding, aggregation,
statistics, comparison) is delegated to the core unchanged.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.config import CovidAPISettings, get_covid_api_settings, get_external_http_settings
from app.connectors.covid_stats_connector import CovidStatsConnector
from db.repositories.preference_repository import PreferenceRepository
from epistats.comparison import ComparisonEngine, window_entity
from epistats.errors import EmptyResultError
from epistats.pipeline import EntityPipeline, StatsProvider
from epistats.session import QuerySession
from epistats.statistics import validate_window
from epistats.types import Catalog, ComparisonResult, CountryAggregate, EntityDetail, EntityWindow

logger = logging.getLogger(__name__)


class CovidStatsService:
    """
    Single-user query facade.

    Catalog searches and detail lookups remember the searched country so
    the next session starts where the user left off.
    """

    def __init__(
        self,
        *,
        session: QuerySession,
        default_country: str,
        catalog_limit: int | None = None,
    ) -> None:
        self._session = session
        self._default_country = default_country
        self._catalog_limit = catalog_limit

    @property
    def default_country(self) -> str:
        return self._default_country

    async def get_catalog(
        self,
        db: Session,
        *,
        date: str,
        limit: int | None = None,
        country: str | None = None,
    ) -> tuple[Catalog, list[CountryAggregate]]:
        """
        Build the snapshot catalog for ``date``, optionally narrowed to one country.

        An empty catalog is returned as-is for an unfiltered query. A
        country search that matches nothing raises EmptyResultError.
        """

        effective_limit = limit if limit is not None else self._catalog_limit
        catalog, aggregates = await self._session.load_catalog(date, limit=effective_limit, country=country)
        if country:
            if catalog.count == 0:
                raise EmptyResultError(f"No data found for '{country}' on {date}.", lookup_key=country)
            self._remember_country(db, country)
        return catalog, aggregates

    async def get_regions(self, country: str, *, limit: int | None = None) -> Catalog:
        catalog = await self._session.load_regions(country, limit=limit)
        if catalog.count == 0:
            raise EmptyResultError(f"No regions found for '{country}'.", lookup_key=country)
        return catalog

    async def get_detail(
        self,
        db: Session,
        country: str,
        *,
        region: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> tuple[EntityDetail, EntityWindow | None]:
        """
        Load one entity. When both window bounds are given, also return the
        windowed series and statistics.
        """

        if (start_date is None) != (end_date is None):
            raise ValueError("start and end must be given together.")
        if start_date is not None and end_date is not None:
            validate_window(start_date, end_date)

        detail = await self._session.load_detail(country, region=region)
        self._remember_country(db, detail.title)

        window = None
        if start_date is not None and end_date is not None:
            window = window_entity(detail, start_date, end_date)
        return detail, window

    async def compare(
        self,
        first_country: str,
        second_country: str,
        start_date: str,
        end_date: str,
    ) -> ComparisonResult:
        return await self._session.compare(first_country, second_country, start_date, end_date)

    def get_last_country(self, db: Session) -> str:
        return PreferenceRepository(db).get_last_country(self._default_country)

    def _remember_country(self, db: Session, country: str) -> None:
        PreferenceRepository(db).set_last_country(country)
        db.commit()
        logger.debug("Stored last country=%r", country)


def build_covid_stats_service(
    provider: StatsProvider,
    settings: CovidAPISettings,
) -> CovidStatsService:
    """
    Wire a provider into pipeline, comparison engine and guarded session.
    """

    pipeline = EntityPipeline(provider)
    session = QuerySession(pipeline, ComparisonEngine(pipeline))
    return CovidStatsService(
        session=session,
        default_country=settings.default_country,
        catalog_limit=settings.catalog_limit,
    )


def create_default_covid_stats_service() -> CovidStatsService:
    """
    Build the COVID statistics service over the configured HTTP connector.
    """

    settings = get_covid_api_settings()
    connector = CovidStatsConnector(
        settings=settings,
        http_settings=get_external_http_settings(),
    )
    return build_covid_stats_service(connector, settings)
