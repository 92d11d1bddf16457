"""
epistats/comparison.py

Side-by-side comparison of two entities over one date window.

:func:`compare_entities` is the pure step: it filters both entities'
case and death series with the identical window, each independently,
so gaps in one entity never shift the other.

:class:`ComparisonEngine` adds the pipeline step: both entity pipelines
run concurrently and the join is fail-fast. Any failure on either side
cancels the other and surfaces as a single
:class:`~epistats.errors.ComparisonFailure` without partial data.
"""

from __future__ import annotations

import asyncio
import logging
import time

from epistats.concurrency import gather_fail_fast, task_failed
from epistats.errors import ComparisonFailure, EpistatsError
from epistats.logging_utils import elapsed_ms, log_event
from epistats.pipeline import EntityPipeline
from epistats.statistics import filter_series, validate_window
from epistats.types import ComparisonResult, EntityDetail, EntityWindow

logger = logging.getLogger(__name__)


def window_entity(detail: EntityDetail, start_date: str, end_date: str) -> EntityWindow:
    return EntityWindow(
        detail=detail,
        cases=filter_series(detail.case_series, start_date, end_date),
        deaths=filter_series(detail.death_series, start_date, end_date),
    )


def compare_entities(
    first: EntityDetail,
    second: EntityDetail,
    start_date: str,
    end_date: str,
) -> ComparisonResult:
    """
    Filter two entities over ``[start_date, end_date]`` for joint display.

    Raises
    ------
    InvalidDateWindowError
        Either bound is not a valid ``YYYY-MM-DD`` date.
    """

    validate_window(start_date, end_date)
    return ComparisonResult(
        first=window_entity(first, start_date, end_date),
        second=window_entity(second, start_date, end_date),
        start_date=start_date,
        end_date=end_date,
    )


class ComparisonEngine:
    """
    Loads two entities concurrently and compares them.
    """

    def __init__(self, pipeline: EntityPipeline) -> None:
        self._pipeline = pipeline

    async def load_pair(self, first_key: str, second_key: str) -> tuple[EntityDetail, EntityDetail]:
        """
        Load both entity details concurrently.

        Raises
        ------
        ComparisonFailure
            Either pipeline failed with a typed query error. The sibling
            pipeline is cancelled and nothing is returned for either side.
        """

        lookup_keys = (first_key, second_key)
        tasks = [asyncio.ensure_future(self._pipeline.load_detail(key)) for key in lookup_keys]
        try:
            first, second = await gather_fail_fast(*tasks)
        except EpistatsError as exc:
            failed_keys = [key for key, task in zip(lookup_keys, tasks) if task_failed(task)]
            log_event(
                logger,
                logging.WARNING,
                "comparison_failed",
                lookup_keys=list(lookup_keys),
                failed_keys=failed_keys,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise ComparisonFailure(
                lookup_keys=lookup_keys,
                failed_keys=failed_keys,
                reason=str(exc),
            ) from exc
        return first, second

    async def compare(
        self,
        first_key: str,
        second_key: str,
        start_date: str,
        end_date: str,
    ) -> ComparisonResult:
        """
        Fetch, aggregate and window two entities.

        The window is validated before any fetch is issued.
        """

        validate_window(start_date, end_date)
        started = time.monotonic()
        first, second = await self.load_pair(first_key, second_key)
        result = compare_entities(first, second, start_date, end_date)
        log_event(
            logger,
            logging.INFO,
            "comparison_completed",
            lookup_keys=[first_key, second_key],
            start_date=start_date,
            end_date=end_date,
            first_case_points=len(result.first.cases.points),
            second_case_points=len(result.second.cases.points),
            duration_ms=elapsed_ms(started),
        )
        return result
