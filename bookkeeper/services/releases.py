"""
Release Service

Validation, CRUD lifecycle, status transitions, search and the balance.

GUARANTEES:
- Nothing reaches storage before it passes validation
- A created release always starts PENDING, whatever the caller sent
- Update and delete refuse unsaved releases without touching storage
- The balance only counts SETTLED releases and uses Decimal arithmetic

Status transitions are unconstrained: any status may replace any other.
"""

from decimal import Decimal
from typing import Optional, Union

from bookkeeper.errors import UNSAVED_DELETE, UNSAVED_UPDATE, PreconditionError
from bookkeeper.models.release import (
    Release,
    ReleaseFilter,
    ReleaseStatus,
    ReleaseType,
)
from bookkeeper.services.storage import ReleaseStorageInterface
from bookkeeper.validation import ReleaseValidator


class ReleaseService:
    """Business operations over a user's releases."""

    def __init__(
        self,
        storage: ReleaseStorageInterface,
        validator: Optional[ReleaseValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or ReleaseValidator()

    def validate(self, release: Release) -> None:
        """
        Check the release against the ordered rules.

        Raises:
            BusinessRuleError: With the message of the first broken rule
        """
        self._validator.validate(release)

    def create(self, release: Release) -> Release:
        """Validate, force PENDING, and save a new release."""
        self.validate(release)
        release.status = ReleaseStatus.PENDING
        return self._storage.save_release(release)

    def update(self, release: Release) -> Release:
        """
        Validate and save an existing release.

        Raises:
            PreconditionError: If the release was never saved
            BusinessRuleError: If validation fails
        """
        if release.id is None:
            raise PreconditionError(UNSAVED_UPDATE)
        self.validate(release)
        return self._storage.save_release(release)

    def delete(self, release: Release) -> None:
        """
        Delete a saved release.

        Raises:
            PreconditionError: If the release was never saved
        """
        if release.id is None:
            raise PreconditionError(UNSAVED_DELETE)
        self._storage.delete_release(release)

    def change_status(self, release: Release, status: ReleaseStatus) -> Release:
        """Set the new status and persist it through `update`."""
        release.status = status
        return self.update(release)

    def search(self, release_filter: Union[ReleaseFilter, Release]) -> list[Release]:
        """
        Find releases matching the filter.

        A Release may be passed as the example; its non-None fields become
        the criteria. Order of the result is unspecified.
        """
        if isinstance(release_filter, Release):
            release_filter = ReleaseFilter.from_release(release_filter)
        return self._storage.find_releases_matching(release_filter)

    def find_by_id(self, release_id: int) -> Optional[Release]:
        """Release with this id, or None."""
        return self._storage.find_release_by_id(release_id)

    def balance_for_user(self, user_id: int) -> Decimal:
        """
        Settled income minus settled expense for one user.

        PENDING and CANCELLED releases never count.
        """
        income = self._storage.sum_release_amount(
            user_id, ReleaseType.INCOME, ReleaseStatus.SETTLED
        )
        expense = self._storage.sum_release_amount(
            user_id, ReleaseType.EXPENSE, ReleaseStatus.SETTLED
        )
        return (income or Decimal("0")) - (expense or Decimal("0"))
