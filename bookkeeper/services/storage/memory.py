"""
In-Memory Storage Implementation

Keeps users and releases in dictionaries. Used by the test-suite and
for running the services without a database.

A re-entrant lock guards every operation; `transaction()` holds it for
the whole block and restores a snapshot if the block raises, so a
check-then-insert inside it cannot interleave with another thread.
"""

import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from bookkeeper.models.release import (
    Release,
    ReleaseFilter,
    ReleaseStatus,
    ReleaseType,
)
from bookkeeper.models.user import User
from bookkeeper.services.storage.interface import (
    DuplicateError,
    StorageError,
    StorageInterface,
    check_amount_scale,
)


class InMemoryStorage(StorageInterface):
    """Dictionary-backed implementation of the storage contract."""

    def __init__(self):
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._releases: dict[int, Release] = {}
        self._next_user_id = 1
        self._next_release_id = 1

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            users = dict(self._users)
            releases = dict(self._releases)
            counters = (self._next_user_id, self._next_release_id)
            try:
                yield
            except BaseException:
                self._users = users
                self._releases = releases
                self._next_user_id, self._next_release_id = counters
                raise

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def save_user(self, user: User) -> User:
        with self._lock:
            for stored in self._users.values():
                if stored.email == user.email and stored.id != user.id:
                    raise DuplicateError(f"Email already registered: {user.email}")

            saved = user.model_copy()
            if saved.id is None:
                saved.id = self._next_user_id
            self._next_user_id = max(self._next_user_id, saved.id + 1)
            if saved.registered_on is None:
                saved.registered_on = date.today()
            self._users[saved.id] = saved
            return saved.model_copy()

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for stored in self._users.values():
                if stored.email == email:
                    return stored.model_copy()
            return None

    def exists_user_by_email(self, email: str) -> bool:
        return self.find_user_by_email(email) is not None

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            stored = self._users.get(user_id)
            return stored.model_copy() if stored else None

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------
    def save_release(self, release: Release) -> Release:
        with self._lock:
            if release.user_id not in self._users:
                raise StorageError(f"User not found: {release.user_id}")
            check_amount_scale(release)

            saved = release.model_copy()
            if saved.id is None:
                saved.id = self._next_release_id
            self._next_release_id = max(self._next_release_id, saved.id + 1)
            if saved.created_on is None:
                saved.created_on = date.today()
            self._releases[saved.id] = saved
            return saved.model_copy()

    def delete_release(self, release: Release) -> None:
        if release.id is None:
            raise StorageError("Cannot delete a release without id")
        with self._lock:
            self._releases.pop(release.id, None)

    def find_release_by_id(self, release_id: int) -> Optional[Release]:
        with self._lock:
            stored = self._releases.get(release_id)
            return stored.model_copy() if stored else None

    def find_releases_matching(self, release_filter: ReleaseFilter) -> list[Release]:
        with self._lock:
            return [
                release.model_copy()
                for release in self._releases.values()
                if release_filter.matches(release)
            ]

    def sum_release_amount(
        self,
        user_id: int,
        release_type: ReleaseType,
        status: ReleaseStatus,
    ) -> Decimal:
        matching = self.find_releases_matching(
            ReleaseFilter(user_id=user_id, type=release_type, status=status)
        )
        return sum((release.amount for release in matching), Decimal("0"))
