"""
tests/test_comparison.py

Two-entity comparison: aligned windows and fail-fast semantics.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
import requests

from app.config import CovidAPISettings, ExternalHTTPSettings
from app.connectors.base import ConnectorRequestError
from app.connectors.covid_stats_connector import CovidStatsConnector
from conftest import FakeProvider
from epistats.comparison import ComparisonEngine, compare_entities
from epistats.errors import ComparisonFailure, DecodeError, InvalidDateWindowError
from epistats.pipeline import EntityPipeline
from epistats.types import EntityDetail, TimeSeriesPoint


def _engine(provider: FakeProvider) -> ComparisonEngine:
    return ComparisonEngine(EntityPipeline(provider))


class _TruncatingSession:
    """Every request dies mid-body, as a dropped connection would."""

    def request(self, **kwargs: Any) -> requests.Response:
        raise requests.exceptions.ChunkedEncodingError(f"body cut off for {kwargs['params']}")


def _connector_engine() -> ComparisonEngine:
    connector = CovidStatsConnector(
        settings=CovidAPISettings(api_key="secret", base_url="https://example.test/covid19"),
        http_settings=ExternalHTTPSettings(
            timeout_seconds=1.0,
            max_retries=0,
            backoff_initial_seconds=0.0,
            backoff_multiplier=1.0,
            rate_limit_per_second=0.0,
        ),
        session=_TruncatingSession(),  # type: ignore[arg-type]
    )
    return ComparisonEngine(EntityPipeline(connector))


class TestCompareEntities:
    def test_filters_both_entities_over_the_same_window(self) -> None:
        first = EntityDetail(
            id="A",
            title="A",
            case_series=(TimeSeriesPoint("2020-03-01", 1), TimeSeriesPoint("2020-03-02", 4)),
            death_series=(),
        )
        second = EntityDetail(id="B", title="B", case_series=(TimeSeriesPoint("2020-03-02", 9),), death_series=())

        result = compare_entities(first, second, "2020-03-02", "2020-03-05")

        assert result.first.cases.points == (TimeSeriesPoint("2020-03-02", 4),)
        assert result.second.cases.points == (TimeSeriesPoint("2020-03-02", 9),)
        assert (result.start_date, result.end_date) == ("2020-03-02", "2020-03-05")

    def test_invalid_window_raises(self) -> None:
        detail = EntityDetail(id="A", title="A", case_series=(), death_series=())
        with pytest.raises(InvalidDateWindowError):
            compare_entities(detail, detail, "2020-03-02", "")


class TestComparisonEngine:
    def test_compares_two_countries(self, canada_provider: FakeProvider) -> None:
        result = asyncio.run(_engine(canada_provider).compare("Canada", "France", "2020-03-02", "2020-03-03"))

        assert result.first.detail.title == "Canada"
        assert [point.value for point in result.first.cases.points] == [21, 32]
        assert result.first.cases.statistics.period_total == 11
        assert result.second.detail.title == "France"
        assert result.second.cases.statistics.period_total == -10
        assert result.second.deaths.statistics.maximum == 9

    def test_fetches_both_countries(self, canada_provider: FakeProvider) -> None:
        asyncio.run(_engine(canada_provider).compare("Canada", "France", "2020-03-01", "2020-03-03"))
        assert {call[1] for call in canada_provider.calls} == {"Canada", "France"}

    def test_one_failed_decode_fails_the_whole_comparison(self, canada_provider: FakeProvider) -> None:
        canada_provider.historical[("France", "deaths", None)] = b"garbage"

        with pytest.raises(ComparisonFailure) as exc_info:
            asyncio.run(_engine(canada_provider).compare("Canada", "France", "2020-03-01", "2020-03-03"))

        failure = exc_info.value
        assert failure.failed_keys == ("France",)
        assert failure.lookup_keys == ("Canada", "France")
        assert not failure.both_failed
        assert isinstance(failure.__cause__, DecodeError)

    def test_missing_country_fails_the_whole_comparison(self, canada_provider: FakeProvider) -> None:
        with pytest.raises(ComparisonFailure) as exc_info:
            asyncio.run(_engine(canada_provider).compare("Canada", "Atlantis", "2020-03-01", "2020-03-03"))
        assert "Atlantis" in exc_info.value.failed_keys

    def test_transport_failure_fails_the_whole_comparison(self) -> None:
        with pytest.raises(ComparisonFailure) as exc_info:
            asyncio.run(_connector_engine().compare("Canada", "France", "2020-03-01", "2020-03-03"))

        failure = exc_info.value
        assert failure.failed_keys
        assert set(failure.failed_keys) <= {"Canada", "France"}
        assert isinstance(failure.__cause__, ConnectorRequestError)

    def test_invalid_window_fails_before_fetching(self, canada_provider: FakeProvider) -> None:
        with pytest.raises(InvalidDateWindowError):
            asyncio.run(_engine(canada_provider).compare("Canada", "France", "last week", "2020-03-03"))
        assert canada_provider.calls == []

    def test_load_pair_returns_both_details(self, canada_provider: FakeProvider) -> None:
        first, second = asyncio.run(_engine(canada_provider).load_pair("France", "Canada"))
        assert (first.title, second.title) == ("France", "Canada")


class TestComparisonFailure:
    def test_both_failed(self) -> None:
        failure = ComparisonFailure(lookup_keys=("A", "B"), failed_keys=["A", "B"], reason="down")
        assert failure.both_failed
        assert "A" in str(failure)
