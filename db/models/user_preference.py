"""
db/models/user_preference.py

Single-user key/value preferences, such as the last country viewed.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class PreferenceKey:
    LAST_COUNTRY = "last_country"


class UserPreference(Base, TimestampMixin):
    __tablename__ = "user_preferences"

    key: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Preference name",
    )
    value: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Preference value as plain text",
    )
