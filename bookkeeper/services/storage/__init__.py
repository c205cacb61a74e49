"""
Storage Services Package

Provides the abstract storage contract and its two implementations:
a relational one (SQLAlchemy) and an in-memory one.
"""

from bookkeeper.services.storage.interface import (
    DuplicateError,
    ReleaseStorageInterface,
    StorageConnectionError,
    StorageError,
    StorageInterface,
    UserStorageInterface,
)
from bookkeeper.services.storage.memory import InMemoryStorage
from bookkeeper.services.storage.sql_storage import (
    ReleaseRecord,
    SqlClient,
    SqlStorage,
    UserRecord,
)

__all__ = [
    # Interfaces
    "ReleaseStorageInterface",
    "StorageInterface",
    "UserStorageInterface",
    # Exceptions
    "DuplicateError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "ReleaseRecord",
    "SqlClient",
    "SqlStorage",
    "UserRecord",
]
