"""
app/connectors/covid_stats_connector.py

API Ninjas COVID-19 connector.

Returns raw response bodies for the two query modes the engine decodes:

    historical   GET {base_url}?country=<name>[&region=<name>]&type=cases|deaths
    snapshot     GET {base_url}?date=YYYY-MM-DD[&country=<name>]&type=cases|deaths

Query values are percent-encoded by ``requests`` here, at the transport
boundary; the engine only ever sees plain names.
"""

from __future__ import annotations

import logging

import requests

from app.config import CovidAPISettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector
from epistats.types import SeriesKind

logger = logging.getLogger(__name__)


class CovidStatsConnector(BaseConnector):
    """
    Connector for per-region case and death figures.

    Implements :class:`epistats.pipeline.StatsProvider`.
    """

    def __init__(
        self,
        *,
        settings: CovidAPISettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="api_ninjas_covid19", http_settings=http_settings, session=session)
        self._settings = settings

    def fetch_historical(self, *, country: str, kind: str, region: str | None = None) -> bytes:
        params = {"country": country, "type": self._validated_kind(kind)}
        if region:
            params["region"] = region
        logger.debug("Fetching historical series country=%r region=%r kind=%s", country, region, kind)
        return self._get(params)

    def fetch_snapshot(self, *, date: str, kind: str, country: str | None = None) -> bytes:
        params = {"date": date, "type": self._validated_kind(kind)}
        if country:
            params["country"] = country
        logger.debug("Fetching snapshot date=%s country=%r kind=%s", date, country, kind)
        return self._get(params)

    def _get(self, params: dict[str, str]) -> bytes:
        return self._request_bytes(
            method="GET",
            url=self._settings.base_url,
            params=params,
            headers=self._headers(),
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._settings.api_key:
            headers["X-Api-Key"] = self._settings.api_key
        return headers

    @staticmethod
    def _validated_kind(kind: str) -> str:
        if kind not in SeriesKind.ALL:
            raise ValueError(f"Unsupported series kind '{kind}'. Allowed kinds: {', '.join(SeriesKind.ALL)}.")
        return kind
