"""
epistats/errors.py

Typed failures raised by the aggregation and query engine.
"""

from __future__ import annotations

from collections.abc import Sequence


class EpistatsError(Exception):
    """Base exception for every failure scoped to a single query."""


class DecodeError(EpistatsError):
    """Raised when a provider payload does not match the expected shape."""

    def __init__(self, message: str, *, mode: str, error_count: int = 1) -> None:
        super().__init__(message)
        self.mode = mode
        self.error_count = error_count


class EmptyResultError(EpistatsError):
    """Raised when a query produced no entity where the caller's contract needs one."""

    def __init__(self, message: str, *, lookup_key: str | None = None) -> None:
        super().__init__(message)
        self.lookup_key = lookup_key


class ProviderUnavailableError(EpistatsError):
    """Raised by a transport collaborator that could not obtain a response."""


class StaleQueryError(EpistatsError):
    """Raised for a query that was superseded by a newer one on the same channel."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"Query on channel '{channel}' was superseded by a newer query.")
        self.channel = channel


class InvalidDateWindowError(EpistatsError, ValueError):
    """Raised when a window bound is not a valid YYYY-MM-DD calendar date."""


class ComparisonFailure(EpistatsError):
    """
    Raised when either side of a two-entity comparison fails.

    Never carries partial data: callers only learn which lookup keys were
    compared, which of them were observed to fail, and why.
    """

    def __init__(
        self,
        *,
        lookup_keys: tuple[str, str],
        failed_keys: Sequence[str],
        reason: str,
    ) -> None:
        failed = ", ".join(repr(key) for key in failed_keys) or "unknown"
        super().__init__(
            f"Comparison of {lookup_keys[0]!r} and {lookup_keys[1]!r} failed "
            f"(failed: {failed}): {reason}"
        )
        self.lookup_keys = lookup_keys
        self.failed_keys = tuple(failed_keys)
        self.reason = reason

    @property
    def both_failed(self) -> bool:
        return len(self.failed_keys) >= 2
