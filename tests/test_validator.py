"""Tests for the ordered release validation rules."""

import pytest
from decimal import Decimal

from bookkeeper.errors import BusinessRuleError
from bookkeeper.models import Release, ReleaseType
from bookkeeper.validation import ReleaseValidator

from factories import make_release


@pytest.fixture
def validator():
    return ReleaseValidator()


def _message(validator: ReleaseValidator, release: Release) -> str:
    with pytest.raises(BusinessRuleError) as exc_info:
        validator.validate(release)
    return exc_info.value.message


class TestValidationOrder:
    """Rules fail one at a time, in field order."""

    def test_fields_filled_in_order(self, validator):
        """Test each message appears until its field becomes valid."""
        release = Release()
        assert _message(validator, release) == "Informe uma descrição válida."

        release.description = ""
        assert _message(validator, release) == "Informe uma descrição válida."

        release.description = "Salario"
        assert _message(validator, release) == "Informe um mês válido."

        release.month = 0
        assert _message(validator, release) == "Informe um mês válido."

        release.month = 13
        assert _message(validator, release) == "Informe um mês válido."

        release.month = 1
        assert _message(validator, release) == "Informe um ano válido."

        release.year = 202
        assert _message(validator, release) == "Informe um ano válido."

        release.year = 2021
        assert _message(validator, release) == "Informe um usuário.."

        release.user_id = 1
        assert _message(validator, release) == "Informe um valor válido.."

        release.amount = Decimal("0")
        assert _message(validator, release) == "Informe um valor válido.."

        release.amount = Decimal("1")
        assert _message(validator, release) == "Informe um tipo de lançamento."

        release.type = ReleaseType.INCOME
        validator.validate(release)

    def test_first_violation_wins(self, validator):
        """Test that an earlier rule hides every later one."""
        release = Release(description="   ", month=99, year=1, amount=Decimal("-1"))
        assert _message(validator, release) == "Informe uma descrição válida."

    def test_all_violations_listed_in_order(self, validator):
        """Test violations() reports every broken rule."""
        assert validator.violations(Release()) == [
            "Informe uma descrição válida.",
            "Informe um mês válido.",
            "Informe um ano válido.",
            "Informe um usuário..",
            "Informe um valor válido..",
            "Informe um tipo de lançamento.",
        ]

    def test_valid_release_has_no_violation(self, validator):
        """Test that a complete release passes."""
        release = make_release()
        assert validator.first_violation(release) is None
        assert validator.violations(release) == []


class TestRuleBoundaries:
    """Edge values for each rule."""

    @pytest.mark.parametrize("description", ["\t", "  \n ", ""])
    def test_blank_descriptions_rejected(self, validator, description):
        """Test that whitespace-only descriptions count as missing."""
        release = make_release(description=description)
        assert _message(validator, release) == "Informe uma descrição válida."

    @pytest.mark.parametrize("month", [1, 12])
    def test_month_bounds_accepted(self, validator, month):
        validator.validate(make_release(month=month))

    @pytest.mark.parametrize("year", [999, 10000, -100, 0])
    def test_years_without_four_digits_rejected(self, validator, year):
        """Test that the year must have exactly four digits."""
        assert _message(validator, make_release(year=year)) == "Informe um ano válido."

    @pytest.mark.parametrize("year", [1000, 9999])
    def test_four_digit_year_bounds_accepted(self, validator, year):
        validator.validate(make_release(year=year))

    def test_negative_amount_rejected(self, validator):
        """Test that the sign belongs to the type, not the amount."""
        release = make_release(amount=Decimal("-10"))
        assert _message(validator, release) == "Informe um valor válido.."

    def test_smallest_positive_amount_accepted(self, validator):
        validator.validate(make_release(amount=Decimal("0.01")))

    def test_status_is_not_validated(self, validator):
        """Test that status is the service's business, not the validator's."""
        validator.validate(make_release(status=None))
