"""Release validation package."""

from bookkeeper.validation.validator import RULES, ReleaseValidator

__all__ = ["RULES", "ReleaseValidator"]
