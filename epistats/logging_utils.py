"""
Structured logging helpers for query pipelines.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Serialization is skipped entirely when ``level`` is disabled.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True, separators=(",", ":")))


def elapsed_ms(started_monotonic: float) -> float:
    """Milliseconds since ``started_monotonic`` (a :func:`time.monotonic` reading)."""

    return round((time.monotonic() - started_monotonic) * 1000.0, 2)
