"""
app/api/errors.py

Translation of core query errors into HTTP errors.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from epistats.errors import (
    ComparisonFailure,
    DecodeError,
    EmptyResultError,
    EpistatsError,
    ProviderUnavailableError,
    StaleQueryError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: EpistatsError | ValueError) -> HTTPException:
    """
    Map a query failure onto the status code the API reports for it.
    """

    if isinstance(exc, ComparisonFailure):
        # A side that was not found reports as not found.
        not_found = isinstance(exc.__cause__, EmptyResultError)
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND if not_found else status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc), "failed": list(exc.failed_keys)},
        )
    if isinstance(exc, StaleQueryError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, EmptyResultError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (DecodeError, ProviderUnavailableError)):
        logger.warning("Upstream statistics provider failed: %s", exc)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
