"""
Data Models Package

This package contains the pydantic domain records used by Bookkeeper.
Services only ever see these; storage backends map them to their own rows.
"""

from bookkeeper.models.release import (
    Release,
    ReleaseFilter,
    ReleaseStatus,
    ReleaseType,
)
from bookkeeper.models.user import User

__all__ = [
    # Release models
    "Release",
    "ReleaseFilter",
    "ReleaseStatus",
    "ReleaseType",
    # User models
    "User",
]
