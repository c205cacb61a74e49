"""
Release Validation Rules

DESIGN DECISION: Rules run in a fixed order and the first violation wins.
The order is observable by callers (they see one message at a time, and
fix fields in that order), so it must never be reshuffled:

1. description - present and not blank
2. month       - 1 to 12
3. year        - exactly four digits
4. user        - owner present
5. amount      - present and greater than zero
6. type        - INCOME or EXPENSE present

IMPORTANT: Validation NEVER fixes data. It only reports.
"""

from decimal import Decimal
from typing import Callable, Optional

from bookkeeper.errors import (
    INVALID_AMOUNT,
    INVALID_DESCRIPTION,
    INVALID_MONTH,
    INVALID_YEAR,
    MISSING_TYPE,
    MISSING_USER,
    BusinessRuleError,
)
from bookkeeper.models.release import Release


def _has_description(release: Release) -> bool:
    return release.description is not None and release.description.strip() != ""


def _has_month(release: Release) -> bool:
    return release.month is not None and 1 <= release.month <= 12


def _has_year(release: Release) -> bool:
    return release.year is not None and 1000 <= release.year <= 9999


def _has_user(release: Release) -> bool:
    return release.user_id is not None


def _has_amount(release: Release) -> bool:
    return release.amount is not None and release.amount > Decimal("0")


def _has_type(release: Release) -> bool:
    return release.type is not None


RULES: list[tuple[Callable[[Release], bool], str]] = [
    (_has_description, INVALID_DESCRIPTION),
    (_has_month, INVALID_MONTH),
    (_has_year, INVALID_YEAR),
    (_has_user, MISSING_USER),
    (_has_amount, INVALID_AMOUNT),
    (_has_type, MISSING_TYPE),
]


class ReleaseValidator:
    """Checks a release against the ordered rules before it is persisted."""

    def __init__(self, rules: Optional[list[tuple[Callable[[Release], bool], str]]] = None):
        self._rules = rules if rules is not None else RULES

    def first_violation(self, release: Release) -> Optional[str]:
        """Message of the first rule the release breaks, or None."""
        for check, message in self._rules:
            if not check(release):
                return message
        return None

    def violations(self, release: Release) -> list[str]:
        """
        Messages of every rule the release breaks, in rule order.

        Useful for showing all problems of a form at once; `validate`
        still reports only the first.
        """
        return [message for check, message in self._rules if not check(release)]

    def validate(self, release: Release) -> None:
        """
        Raise on the first violated rule.

        Raises:
            BusinessRuleError: With the rule's user-facing message
        """
        message = self.first_violation(release)
        if message is not None:
            raise BusinessRuleError(message)
