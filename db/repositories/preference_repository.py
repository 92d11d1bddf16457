"""
Repository for the single-user preference store.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from db.models.user_preference import PreferenceKey, UserPreference


class PreferenceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, key: str) -> str | None:
        preference = self._session.get(UserPreference, key)
        if preference is None:
            return None
        return preference.value

    def set(self, key: str, value: str) -> UserPreference:
        """Insert or overwrite ``key``. The caller owns the commit."""
        preference = self._session.get(UserPreference, key)
        if preference is None:
            preference = UserPreference(key=key, value=value)
            self._session.add(preference)
        else:
            preference.value = value
        self._session.flush()
        return preference

    def get_last_country(self, default: str) -> str:
        stored = self.get(PreferenceKey.LAST_COUNTRY)
        return stored if stored else default

    def set_last_country(self, country: str) -> UserPreference:
        return self.set(PreferenceKey.LAST_COUNTRY, country)
