"""
epistats/catalog.py

Catalog builder: sorted reference lists of countries and regions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Union

from epistats.aggregation import aggregate_records
from epistats.logging_utils import log_event
from epistats.types import Catalog, CatalogEntry, CountryAggregate, RawRegionRecord, RawSnapshotRecord

logger = logging.getLogger(__name__)


def _sorted_prefix(entries: Iterable[CatalogEntry], limit: int | None) -> Catalog:
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}.")

    # Sort before truncating so every limit returns a prefix of the same order.
    ordered = sorted(entries, key=lambda entry: entry.display_name)
    if limit is not None:
        ordered = ordered[:limit]
    return Catalog(count=len(ordered), results=tuple(ordered))


def build_catalog(aggregates: Iterable[CountryAggregate], limit: int | None = None) -> Catalog:
    """
    Build a catalog with one entry per country aggregate.

    Entries are ordered by display name using case-sensitive ordinal
    comparison. ``limit`` keeps only the first ``limit`` sorted entries.

    Raises
    ------
    ValueError
        ``limit`` is negative.
    """

    catalog = _sorted_prefix(
        (CatalogEntry(display_name=aggregate.name, lookup_key=aggregate.name) for aggregate in aggregates),
        limit,
    )
    log_event(logger, logging.DEBUG, "catalog_built", kind="country", count=catalog.count, limit=limit)
    return catalog


def build_catalog_from_records(
    records: Sequence[Union[RawSnapshotRecord, RawRegionRecord]],
    limit: int | None = None,
) -> Catalog:
    """
    Aggregate raw records by country, then build the catalog.
    """

    return build_catalog(aggregate_records(records), limit=limit)


def build_region_catalog(records: Iterable[RawRegionRecord], limit: int | None = None) -> Catalog:
    """
    Build a catalog of the regions returned by a historical query.

    Regions with an empty name stand for the whole country and are listed
    under the country name. The lookup key is always the country name; the
    region qualifies it.
    """

    unique_pairs = {(record.country_name, record.region_name) for record in records}
    catalog = _sorted_prefix(
        (
            CatalogEntry(
                display_name=region or country,
                lookup_key=country,
                region=region or None,
            )
            for country, region in sorted(unique_pairs)
        ),
        limit,
    )
    log_event(logger, logging.DEBUG, "catalog_built", kind="region", count=catalog.count, limit=limit)
    return catalog
