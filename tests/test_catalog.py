"""
tests/test_catalog.py

Catalog ordering, truncation and region listings.
"""

from __future__ import annotations

import itertools
import logging

import pytest

from epistats.catalog import build_catalog, build_catalog_from_records, build_region_catalog
from epistats.types import CatalogEntry, CountryAggregate, RawRegionRecord, RawSnapshotRecord, SeriesValue

NAMES = ["Brazil", "Canada", "Chile"]


def _aggregates(names: list[str]) -> list[CountryAggregate]:
    return [CountryAggregate(name=name) for name in names]


class TestBuildCatalog:
    @pytest.mark.parametrize("order", list(itertools.permutations(NAMES)))
    def test_sorted_alphabetically_whatever_the_input_order(self, order: tuple[str, ...]) -> None:
        catalog = build_catalog(_aggregates(list(order)))
        assert [entry.display_name for entry in catalog.results] == NAMES
        assert catalog.count == 3

    def test_lookup_key_is_the_country_name(self) -> None:
        catalog = build_catalog(_aggregates(["Canada"]))
        assert catalog.results == (CatalogEntry(display_name="Canada", lookup_key="Canada"),)

    def test_limit_keeps_first_alphabetical_entries(self) -> None:
        catalog = build_catalog(_aggregates(["Chile", "Canada", "Brazil"]), limit=1)
        assert catalog.count == 1
        assert catalog.results[0].display_name == "Brazil"

    def test_limit_zero_yields_empty_catalog(self) -> None:
        assert build_catalog(_aggregates(NAMES), limit=0).count == 0

    def test_limit_above_size_keeps_everything(self) -> None:
        assert build_catalog(_aggregates(NAMES), limit=50).count == 3

    def test_negative_limit_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_catalog(_aggregates(NAMES), limit=-1)

    def test_ordering_is_case_sensitive(self) -> None:
        catalog = build_catalog(_aggregates(["bhutan", "Chile"]))
        assert [entry.display_name for entry in catalog.results] == ["Chile", "bhutan"]

    def test_empty_input_yields_empty_catalog(self) -> None:
        catalog = build_catalog([])
        assert catalog.count == 0
        assert catalog.results == ()

    def test_logs_catalog_built_event(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="epistats.catalog"):
            build_catalog(_aggregates(NAMES))
        assert any('"event":"catalog_built"' in record.getMessage() for record in caplog.records)


class TestBuildCatalogFromRecords:
    def test_aggregates_snapshot_regions_first(self) -> None:
        records = [
            RawSnapshotRecord("Canada", "Ontario", SeriesValue(25, 10)),
            RawSnapshotRecord("Canada", "Quebec", SeriesValue(7, 1)),
            RawSnapshotRecord("Brazil", "", SeriesValue(9, 1)),
        ]

        catalog = build_catalog_from_records(records)

        assert [entry.lookup_key for entry in catalog.results] == ["Brazil", "Canada"]


class TestBuildRegionCatalog:
    def test_lists_unique_regions_sorted(self) -> None:
        records = [
            RawRegionRecord("Canada", "Quebec"),
            RawRegionRecord("Canada", "Ontario"),
            RawRegionRecord("Canada", "Ontario"),
        ]

        catalog = build_region_catalog(records)

        assert catalog.results == (
            CatalogEntry(display_name="Ontario", lookup_key="Canada", region="Ontario"),
            CatalogEntry(display_name="Quebec", lookup_key="Canada", region="Quebec"),
        )

    def test_unnamed_region_is_listed_under_the_country(self) -> None:
        catalog = build_region_catalog([RawRegionRecord("France", "")])
        assert catalog.results == (CatalogEntry(display_name="France", lookup_key="France", region=None),)

    def test_limit_applies_after_sorting(self) -> None:
        records = [RawRegionRecord("Canada", name) for name in ("Yukon", "Alberta", "Manitoba")]
        catalog = build_region_catalog(records, limit=2)
        assert [entry.display_name for entry in catalog.results] == ["Alberta", "Manitoba"]
