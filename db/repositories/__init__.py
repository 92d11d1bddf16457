"""
Repository layer exports.
"""

from db.repositories.preference_repository import PreferenceRepository

__all__ = [
    "PreferenceRepository",
]
