"""
epistats/concurrency.py

Structured concurrency helpers for query pipelines.

``gather_fail_fast``
    Join concurrent sub-tasks; the first failure cancels the siblings and
    is re-raised. No partial results are ever returned.

``LatestQueryGuard``
    Last-query-wins gate for one query channel: a new submission cancels
    the in-flight one and a superseded result is never handed back.

Both are event-loop confined and must not be shared across loops or threads.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, TypeVar

from epistats.errors import StaleQueryError
from epistats.logging_utils import log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _cancel_and_drain(tasks: Iterable[asyncio.Future[Any]]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


def task_failed(task: asyncio.Future[Any]) -> bool:
    """True when ``task`` finished by raising (cancellation does not count)."""

    return task.done() and not task.cancelled() and task.exception() is not None


async def gather_fail_fast(*awaitables: Awaitable[T]) -> list[T]:
    """
    Run ``awaitables`` concurrently and return their results in order.

    On the first failure every still-running sibling is cancelled and
    awaited, then that failure is raised. If the caller is cancelled,
    all sub-tasks are cancelled before the cancellation propagates.
    """

    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_and_drain(tasks)
        raise

    if pending:
        await _cancel_and_drain(pending)

    # Every failure is retrieved, not only the one raised.
    failures = [task.exception() for task in tasks if task in done and task_failed(task)]
    if failures:
        raise failures[0]  # type: ignore[misc]
    return [task.result() for task in tasks]


class LatestQueryGuard:
    """
    Serializes one query channel on a last-query-wins basis.

    Each :meth:`run` bumps the channel generation and cancels the previous
    in-flight query. A query whose generation is no longer current raises
    :class:`~epistats.errors.StaleQueryError` instead of returning, even if
    its result arrived before the newer query finished.
    """

    def __init__(self, channel: str) -> None:
        self._channel = channel
        self._generation = 0
        self._inflight: asyncio.Future[Any] | None = None

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def run(self, awaitable: Awaitable[T]) -> T:
        self._generation += 1
        generation = self._generation

        previous = self._inflight
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(awaitable)
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if not self.is_current(generation):
                self._log_superseded(generation)
                raise StaleQueryError(self._channel) from None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if not self.is_current(generation):
            self._log_superseded(generation)
            raise StaleQueryError(self._channel)
        return result

    def _log_superseded(self, generation: int) -> None:
        log_event(
            logger,
            logging.INFO,
            "query_superseded",
            channel=self._channel,
            generation=generation,
            current_generation=self._generation,
        )
