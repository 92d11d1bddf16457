"""
Epidemiological case/death aggregation and time-series query engine.
"""

from epistats.aggregation import (
    aggregate_records,
    aggregate_regions,
    aggregate_snapshots,
    build_entity_detail,
    merge_series,
)
from epistats.catalog import build_catalog, build_catalog_from_records, build_region_catalog
from epistats.comparison import ComparisonEngine, compare_entities
from epistats.decoder import QueryMode, decode_historical, decode_records, decode_snapshot
from epistats.errors import (
    ComparisonFailure,
    DecodeError,
    EmptyResultError,
    EpistatsError,
    InvalidDateWindowError,
    ProviderUnavailableError,
    StaleQueryError,
)
from epistats.pipeline import EntityPipeline, StatsProvider
from epistats.session import QuerySession
from epistats.statistics import compute_period_statistics, filter_series, latest_point
from epistats.types import (
    Catalog,
    CatalogEntry,
    ComparisonResult,
    CountryAggregate,
    EntityDetail,
    EntityWindow,
    FilteredSeries,
    PeriodStatistics,
    RawRegionRecord,
    RawSnapshotRecord,
    SeriesKind,
    SeriesValue,
    TimeSeries,
    TimeSeriesPoint,
)

__all__ = [
    "Catalog",
    "CatalogEntry",
    "ComparisonEngine",
    "ComparisonFailure",
    "ComparisonResult",
    "CountryAggregate",
    "DecodeError",
    "EmptyResultError",
    "EntityDetail",
    "EntityPipeline",
    "EntityWindow",
    "EpistatsError",
    "FilteredSeries",
    "InvalidDateWindowError",
    "PeriodStatistics",
    "ProviderUnavailableError",
    "QueryMode",
    "QuerySession",
    "RawRegionRecord",
    "RawSnapshotRecord",
    "SeriesKind",
    "SeriesValue",
    "StaleQueryError",
    "StatsProvider",
    "TimeSeries",
    "TimeSeriesPoint",
    "aggregate_records",
    "aggregate_regions",
    "aggregate_snapshots",
    "build_catalog",
    "build_catalog_from_records",
    "build_entity_detail",
    "build_region_catalog",
    "compare_entities",
    "compute_period_statistics",
    "decode_historical",
    "decode_records",
    "decode_snapshot",
    "filter_series",
    "latest_point",
    "merge_series",
]
