"""
Release Models for Bookkeeper

A release is a single bookkeeping entry (income or expense) that belongs
to a user. These models are the domain records the services operate on;
the relational gateway keeps its own persistence records.

DESIGN DECISION: Every field of a Release is optional at the model level.
Callers may hand us incomplete data, and the release validator must be
the one to reject it with the ordered, user-facing messages. Putting
constraints here would make pydantic fail first with its own wording.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ReleaseType(str, Enum):
    """
    Sign of a release with respect to the balance.

    The amount is always positive; the type carries the sign.
    """
    INCOME = "INCOME"    # Adds to the balance
    EXPENSE = "EXPENSE"  # Subtracts from the balance


class ReleaseStatus(str, Enum):
    """
    Lifecycle stage of a release.

    Only SETTLED releases contribute to the balance. Any status may
    replace any other; there is no terminal state.
    """
    PENDING = "PENDING"      # Recorded but not realized
    SETTLED = "SETTLED"      # Realized
    CANCELLED = "CANCELLED"  # Voided


# =============================================================================
# CORE RELEASE MODEL
# =============================================================================

class Release(BaseModel):
    """
    A single financial entry.

    `status` is set by the release service: PENDING on creation, and
    through `change_status` afterwards.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = Field(
        default=None,
        description="Identifier assigned by storage on first save"
    )
    description: Optional[str] = Field(
        default=None,
        description="What this entry is about"
    )
    month: Optional[int] = Field(
        default=None,
        description="Month of the entry (1-12)"
    )
    year: Optional[int] = Field(
        default=None,
        description="Four digit year of the entry"
    )
    user_id: Optional[int] = Field(
        default=None,
        description="Owner of the entry"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Strictly positive amount"
    )
    type: Optional[ReleaseType] = Field(
        default=None,
        description="INCOME or EXPENSE"
    )
    status: Optional[ReleaseStatus] = Field(
        default=None,
        description="Lifecycle stage"
    )
    created_on: Optional[date] = Field(
        default=None,
        description="Date of first persistence"
    )

    @property
    def is_saved(self) -> bool:
        """Has storage assigned an id to this release?"""
        return self.id is not None


class ReleaseFilter(BaseModel):
    """
    Query-by-example filter for releases.

    Fields left as None match anything. String fields match exactly
    (no case folding, no partial matching).
    """

    id: Optional[int] = None
    description: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    user_id: Optional[int] = None
    amount: Optional[Decimal] = None
    type: Optional[ReleaseType] = None
    status: Optional[ReleaseStatus] = None

    @classmethod
    def from_release(cls, release: Release) -> "ReleaseFilter":
        """Build a filter from the non-None fields of an example release."""
        return cls(**release.model_dump(exclude_none=True, exclude={"created_on"}))

    def criteria(self) -> dict:
        """The constraining fields only."""
        return self.model_dump(exclude_none=True)

    def matches(self, release: Release) -> bool:
        """Check whether a release satisfies every set field."""
        return all(
            getattr(release, field) == value
            for field, value in self.criteria().items()
        )
