"""
tests/test_preference_repository.py

Single-user preference store over an in-memory SQLite database.
"""

from __future__ import annotations

from sqlalchemy import func, select

from db.models.user_preference import PreferenceKey, UserPreference
from db.repositories.preference_repository import PreferenceRepository


class TestPreferenceRepository:
    def test_missing_key_returns_none(self, db_session_factory) -> None:
        with db_session_factory() as db:
            assert PreferenceRepository(db).get("theme") is None

    def test_set_then_get(self, db_session_factory) -> None:
        with db_session_factory() as db:
            repository = PreferenceRepository(db)
            repository.set("theme", "dark")
            db.commit()

        with db_session_factory() as db:
            assert PreferenceRepository(db).get("theme") == "dark"

    def test_set_upserts_a_single_row(self, db_session_factory) -> None:
        with db_session_factory() as db:
            repository = PreferenceRepository(db)
            repository.set_last_country("Canada")
            repository.set_last_country("France")
            db.commit()

            rows = db.scalar(select(func.count()).select_from(UserPreference))
            assert rows == 1
            assert repository.get(PreferenceKey.LAST_COUNTRY) == "France"

    def test_last_country_defaults_when_unset(self, db_session_factory) -> None:
        with db_session_factory() as db:
            assert PreferenceRepository(db).get_last_country("Canada") == "Canada"

    def test_last_country_round_trip(self, db_session_factory) -> None:
        with db_session_factory() as db:
            PreferenceRepository(db).set_last_country("Chile")
            db.commit()
            assert PreferenceRepository(db).get_last_country("Canada") == "Chile"
