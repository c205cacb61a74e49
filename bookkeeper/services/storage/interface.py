"""
Abstract Storage Interface

DESIGN DECISION: Services depend on an abstract storage contract, never
on a concrete database. This allows us to:
1. Run the relational (SQLAlchemy) store in production
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally small - just the queries and mutations
the user and release services need.

Records passed in and returned are copies. Mutating a returned record
does not touch storage until it is saved again.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Optional

from bookkeeper.models.release import (
    Release,
    ReleaseFilter,
    ReleaseStatus,
    ReleaseType,
)
from bookkeeper.models.user import User


# Amounts are stored with two decimal places
AMOUNT_QUANTUM = Decimal("0.01")


def check_amount_scale(release: Release) -> None:
    """
    Refuse an amount the storage cannot keep exactly.

    Raises:
        StorageError: If the amount has more than two decimal places
    """
    amount = release.amount
    if amount is None:
        return
    if not amount.is_finite() or amount != amount.quantize(AMOUNT_QUANTUM):
        raise StorageError(f"Amount does not fit two decimal places: {amount}")


class UserStorageInterface(ABC):
    """
    Abstract interface for user storage operations.

    Email uniqueness must be enforced by the implementation; a violation
    raises DuplicateError.
    """

    @abstractmethod
    def save_user(self, user: User) -> User:
        """
        Save a user.

        Args:
            user: The user to save. If it has no id, one is assigned
                  together with the registration date.

        Returns:
            The saved user, carrying its id

        Raises:
            DuplicateError: If another user already has this email
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by exact email.

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    def exists_user_by_email(self, email: str) -> bool:
        """Check whether any user has exactly this email."""
        pass

    @abstractmethod
    def find_user_by_id(self, user_id: int) -> Optional[User]:
        """Retrieve a user by id, or None."""
        pass


class ReleaseStorageInterface(ABC):
    """Abstract interface for release storage operations."""

    @abstractmethod
    def save_release(self, release: Release) -> Release:
        """
        Insert or update a release.

        Args:
            release: Without an id it is inserted (id and creation date
                     assigned); with an id it replaces the stored row.

        Returns:
            The saved release

        Raises:
            StorageError: If save fails (e.g. owner does not exist, or the
                amount has more than two decimal places)
        """
        pass

    @abstractmethod
    def delete_release(self, release: Release) -> None:
        """
        Delete a release.

        Raises:
            StorageError: If the release has no id or the delete fails
        """
        pass

    @abstractmethod
    def find_release_by_id(self, release_id: int) -> Optional[Release]:
        """Retrieve a release by id, or None."""
        pass

    @abstractmethod
    def find_releases_matching(self, release_filter: ReleaseFilter) -> list[Release]:
        """
        Query by example.

        Args:
            release_filter: Only its non-None fields constrain the result.
                            Strings match exactly.

        Returns:
            Matching releases, in no particular order
        """
        pass

    @abstractmethod
    def sum_release_amount(
        self,
        user_id: int,
        release_type: ReleaseType,
        status: ReleaseStatus,
    ) -> Decimal:
        """
        Sum amounts of one user's releases of a given type and status.

        Returns:
            The total, Decimal("0") when nothing matches
        """
        pass


class StorageInterface(UserStorageInterface, ReleaseStorageInterface):
    """
    Complete storage contract consumed by the services.

    Besides the user and release operations it offers `transaction()`,
    the only way to make several calls one atomic unit.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """
        Context manager grouping the enclosed calls into one atomic unit.

        Changes are committed on normal exit and rolled back when the
        block raises.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
