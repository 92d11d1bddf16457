"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.user_preference import PreferenceKey, UserPreference

__all__ = [
    "PreferenceKey",
    "UserPreference",
]
