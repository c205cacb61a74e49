"""Services package."""

from bookkeeper.services.releases import ReleaseService
from bookkeeper.services.storage import (
    DuplicateError,
    InMemoryStorage,
    ReleaseStorageInterface,
    SqlClient,
    SqlStorage,
    StorageConnectionError,
    StorageError,
    StorageInterface,
    UserStorageInterface,
)
from bookkeeper.services.users import UserService

__all__ = [
    # Domain services
    "ReleaseService",
    "UserService",
    # Storage services
    "DuplicateError",
    "InMemoryStorage",
    "ReleaseStorageInterface",
    "SqlClient",
    "SqlStorage",
    "StorageConnectionError",
    "StorageError",
    "StorageInterface",
    "UserStorageInterface",
]
