"""
tests/conftest.py

Shared fixtures: a scripted statistics provider and payload builders.
"""

from __future__ import annotations

import json
import os
import threading
from typing import Any

import pytest

os.environ.setdefault("COVID_API_KEY", "test-key")


def region_row(country: str, region: str, cases: dict | None = None, deaths: dict | None = None) -> dict[str, Any]:
    row: dict[str, Any] = {"country": country, "region": region}
    if cases is not None:
        row["cases"] = {day: {"total": total, "new": new} for day, (total, new) in cases.items()}
    if deaths is not None:
        row["deaths"] = {day: {"total": total, "new": new} for day, (total, new) in deaths.items()}
    return row


def snapshot_row(
    country: str,
    region: str,
    cases: tuple[int, int] | None = None,
    deaths: tuple[int, int] | None = None,
) -> dict[str, Any]:
    row: dict[str, Any] = {"country": country, "region": region}
    if cases is not None:
        row["cases"] = {"total": cases[0], "new": cases[1]}
    if deaths is not None:
        row["deaths"] = {"total": deaths[0], "new": deaths[1]}
    return row


def encode(rows: list[dict[str, Any]]) -> bytes:
    return json.dumps(rows).encode("utf-8")


class FakeProvider:
    """
    Scripted provider keyed the way the connector is queried.

    A scripted value is either response bytes or an exception instance to
    raise. Unscripted queries answer with an empty list.
    """

    def __init__(self) -> None:
        self.historical: dict[tuple[str, str, str | None], Any] = {}
        self.snapshots: dict[tuple[str, str, str | None], Any] = {}
        self.calls: list[tuple[Any, ...]] = []
        self._lock = threading.Lock()

    def fetch_historical(self, *, country: str, kind: str, region: str | None = None) -> bytes:
        with self._lock:
            self.calls.append(("historical", country, kind, region))
        return self._answer(self.historical.get((country, kind, region), b"[]"))

    def fetch_snapshot(self, *, date: str, kind: str, country: str | None = None) -> bytes:
        with self._lock:
            self.calls.append(("snapshot", date, kind, country))
        return self._answer(self.snapshots.get((date, kind, country), b"[]"))

    @staticmethod
    def _answer(scripted: Any) -> bytes:
        if isinstance(scripted, Exception):
            raise scripted
        return scripted


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def canada_provider(provider: FakeProvider) -> FakeProvider:
    """Provider answering for Canada (two provinces) and France (one region)."""

    provider.historical[("Canada", "cases", None)] = encode(
        [
            region_row("Canada", "Ontario", cases={"2020-03-01": (10, 10), "2020-03-02": (15, 5), "2020-03-03": (25, 10)}),
            region_row("Canada", "Quebec", cases={"2020-03-01": (4, 4), "2020-03-02": (6, 2), "2020-03-03": (7, 1)}),
        ]
    )
    provider.historical[("Canada", "deaths", None)] = encode(
        [
            region_row("Canada", "Ontario", deaths={"2020-03-01": (1, 1), "2020-03-02": (1, 0), "2020-03-03": (2, 1)}),
            region_row("Canada", "Quebec", deaths={"2020-03-01": (0, 0), "2020-03-02": (1, 1), "2020-03-03": (1, 0)}),
        ]
    )
    provider.historical[("France", "cases", None)] = encode(
        [region_row("France", "", cases={"2020-03-01": (100, 100), "2020-03-02": (130, 30), "2020-03-03": (120, -10)})]
    )
    provider.historical[("France", "deaths", None)] = encode(
        [region_row("France", "", deaths={"2020-03-01": (3, 3), "2020-03-02": (5, 2), "2020-03-03": (9, 4)})]
    )
    return provider


@pytest.fixture()
def db_session_factory():
    """In-memory SQLite preference store shared across threads."""

    from sqlalchemy import create_engine
    from sqlalchemy.orm import Session, sessionmaker
    from sqlalchemy.pool import StaticPool

    import db.models  # noqa: F401
    from db.base import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()
