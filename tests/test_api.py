"""
tests/test_api.py

HTTP surface over a scripted provider and an in-memory preference store.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.errors import to_http_exception
from app.config import CovidAPISettings
from app.main import create_app
from app.services.covid_stats_service import build_covid_stats_service
from conftest import FakeProvider, encode, snapshot_row
from db.session import get_db
from epistats.errors import ComparisonFailure, EmptyResultError, ProviderUnavailableError, StaleQueryError


@pytest.fixture()
def client(canada_provider: FakeProvider, db_session_factory) -> TestClient:
    canada_provider.snapshots[("2020-03-03", "cases", None)] = encode(
        [
            snapshot_row("Canada", "Ontario", cases=(25, 10)),
            snapshot_row("Canada", "Quebec", cases=(7, 1)),
            snapshot_row("Brazil", "", cases=(40, 4)),
            snapshot_row("Chile", "", cases=(3, 0)),
        ]
    )
    canada_provider.snapshots[("2020-03-03", "deaths", None)] = encode(
        [snapshot_row("Canada", "Ontario", deaths=(2, 1))]
    )

    service = build_covid_stats_service(canada_provider, CovidAPISettings(default_country="Canada"))
    application = create_app(service=service, validate_env=False, lifespan=None)

    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    return TestClient(application)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCatalogEndpoint:
    def test_lists_countries_with_totals(self, client: TestClient) -> None:
        response = client.get("/catalog", params={"date": "2020-03-03"})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert [entry["display_name"] for entry in body["results"]] == ["Brazil", "Canada", "Chile"]
        canada = body["results"][1]
        assert canada["total_cases"] == 32
        assert canada["new_cases"] == 11
        assert canada["total_deaths"] == 2

    def test_limit_truncates_sorted_catalog(self, client: TestClient) -> None:
        body = client.get("/catalog", params={"date": "2020-03-03", "limit": 1}).json()
        assert [entry["display_name"] for entry in body["results"]] == ["Brazil"]

    def test_negative_limit_is_bad_request(self, client: TestClient) -> None:
        assert client.get("/catalog", params={"date": "2020-03-03", "limit": -1}).status_code == 400

    def test_invalid_date_is_bad_request(self, client: TestClient) -> None:
        assert client.get("/catalog", params={"date": "March 3rd"}).status_code == 400

    def test_country_search_without_match_is_not_found(self, client: TestClient) -> None:
        response = client.get("/catalog", params={"date": "2020-03-03", "country": "Atlantis"})
        assert response.status_code == 404

    def test_unfiltered_empty_catalog_is_ok(self, client: TestClient) -> None:
        body = client.get("/catalog", params={"date": "2021-01-01"}).json()
        assert body == {"count": 0, "results": []}


class TestCountryEndpoints:
    def test_regions(self, client: TestClient) -> None:
        body = client.get("/countries/Canada/regions").json()
        assert [entry["region"] for entry in body["results"]] == ["Ontario", "Quebec"]
        assert {entry["lookup_key"] for entry in body["results"]} == {"Canada"}

    def test_regions_of_unknown_country_are_not_found(self, client: TestClient) -> None:
        assert client.get("/countries/Atlantis/regions").status_code == 404

    def test_detail_without_window(self, client: TestClient) -> None:
        body = client.get("/countries/Canada").json()

        assert body["title"] == "Canada"
        assert [point["value"] for point in body["case_series"]] == [14, 21, 32]
        assert body["latest_death"] == {"date": "2020-03-03", "value": 3}
        assert body["window"] is None

    def test_detail_with_window_carries_statistics(self, client: TestClient) -> None:
        body = client.get("/countries/Canada", params={"start": "2020-03-02", "end": "2020-03-03"}).json()

        window = body["window"]
        assert [point["date"] for point in window["cases"]["points"]] == ["2020-03-02", "2020-03-03"]
        assert window["cases"]["statistics"] == {"minimum": 21, "maximum": 32, "average": 26, "period_total": 11}

    def test_detail_of_one_region(self, client: TestClient) -> None:
        body = client.get("/countries/Canada", params={"region": "Ontario"}).json()
        assert body["region"] == "Ontario"
        assert body["latest_case"] == {"date": "2020-03-03", "value": 25}

    def test_half_open_window_is_bad_request(self, client: TestClient) -> None:
        assert client.get("/countries/Canada", params={"start": "2020-03-02"}).status_code == 400

    def test_invalid_window_is_bad_request(self, client: TestClient) -> None:
        response = client.get("/countries/Canada", params={"start": "2020-03-02", "end": "tomorrow"})
        assert response.status_code == 400

    def test_unknown_country_is_not_found(self, client: TestClient) -> None:
        assert client.get("/countries/Atlantis").status_code == 404

    def test_malformed_provider_answer_is_bad_gateway(self, client: TestClient, canada_provider: FakeProvider) -> None:
        canada_provider.historical[("France", "cases", None)] = b"{}"
        assert client.get("/countries/France").status_code == 502

    def test_provider_outage_is_bad_gateway(self, client: TestClient, canada_provider: FakeProvider) -> None:
        canada_provider.historical[("France", "deaths", None)] = ProviderUnavailableError("timeout")
        assert client.get("/countries/France").status_code == 502


class TestCompareEndpoint:
    def test_compares_two_countries(self, client: TestClient) -> None:
        response = client.get(
            "/compare",
            params={"first": "Canada", "second": "France", "start": "2020-03-01", "end": "2020-03-03"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["first"]["title"] == "Canada"
        assert body["second"]["cases"]["statistics"]["period_total"] == 20
        assert (body["start_date"], body["end_date"]) == ("2020-03-01", "2020-03-03")

    def test_failed_side_fails_the_comparison(self, client: TestClient) -> None:
        response = client.get(
            "/compare",
            params={"first": "Canada", "second": "Atlantis", "start": "2020-03-01", "end": "2020-03-03"},
        )

        assert response.status_code == 404
        assert "Atlantis" in response.json()["detail"]["failed"]

    def test_upstream_failure_on_one_side_is_bad_gateway(self, client: TestClient, canada_provider: FakeProvider) -> None:
        canada_provider.historical[("France", "cases", None)] = b"garbage"

        response = client.get(
            "/compare",
            params={"first": "Canada", "second": "France", "start": "2020-03-01", "end": "2020-03-03"},
        )

        assert response.status_code == 502
        assert response.json()["detail"]["failed"] == ["France"]

    def test_invalid_window_is_bad_request(self, client: TestClient) -> None:
        response = client.get(
            "/compare",
            params={"first": "Canada", "second": "France", "start": "2020-03-01", "end": "2020-02-30"},
        )
        assert response.status_code == 400


class TestPreferences:
    def test_defaults_to_configured_country(self, client: TestClient) -> None:
        assert client.get("/preferences/last-country").json() == {"country": "Canada"}

    def test_detail_lookup_is_remembered(self, client: TestClient) -> None:
        client.get("/countries/France")
        assert client.get("/preferences/last-country").json() == {"country": "France"}

    def test_failed_lookup_is_not_remembered(self, client: TestClient) -> None:
        client.get("/countries/France")
        client.get("/countries/Atlantis")
        assert client.get("/preferences/last-country").json() == {"country": "France"}


class TestErrorMapping:
    def test_stale_query_is_conflict(self) -> None:
        assert to_http_exception(StaleQueryError("detail")).status_code == 409

    def test_plain_value_error_is_bad_request(self) -> None:
        assert to_http_exception(ValueError("nope")).status_code == 400

    def test_comparison_status_follows_its_cause(self) -> None:
        def failure_caused_by(cause: Exception) -> ComparisonFailure:
            failure = ComparisonFailure(lookup_keys=("Canada", "Atlantis"), failed_keys=["Atlantis"], reason=str(cause))
            failure.__cause__ = cause
            return failure

        assert to_http_exception(failure_caused_by(EmptyResultError("none"))).status_code == 404
        assert to_http_exception(failure_caused_by(ProviderUnavailableError("down"))).status_code == 502
