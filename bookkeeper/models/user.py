"""
User Model for Bookkeeper

DESIGN DECISION: The password is an opaque string stored exactly as
given. Authentication compares it verbatim. Hashing is a deployment
decision that has not been made yet (see DESIGN.md).
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    A registered account.

    Email is case-sensitive and unique across all users. Uniqueness is
    enforced at registration time by the user service and, as the final
    arbiter, by the storage backend.
    """

    id: Optional[int] = Field(
        default=None,
        description="Identifier assigned by storage on first save"
    )
    name: Optional[str] = Field(
        default=None,
        description="Display name"
    )
    email: Optional[str] = Field(
        default=None,
        description="Login email (case-sensitive)"
    )
    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="Credential, stored verbatim"
    )
    registered_on: Optional[date] = Field(
        default=None,
        description="Date the account was created"
    )
