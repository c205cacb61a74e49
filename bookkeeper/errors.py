"""
Domain Errors

Every failure the services report falls into one of three domain kinds
below, or into the storage kind defined next to the storage interface.
None of them is recovered from inside the services: they bubble to the
caller with a human-readable message that can be shown verbatim.
"""


class BookkeeperError(Exception):
    """Base exception for domain failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BusinessRuleError(BookkeeperError):
    """Caller-supplied data violates a domain rule (validation, duplicate email)."""
    pass


class AuthenticationError(BookkeeperError):
    """Unknown email or wrong password."""
    pass


class PreconditionError(BookkeeperError):
    """Operation requires a saved entity but got an unsaved one."""
    pass


# User-facing messages. Punctuation is part of the contract.
DUPLICATE_EMAIL = "Já existe um usuario cadastrado com esse email."
USER_NOT_FOUND = "Usuario não encontrado para o email informado!!"
INVALID_PASSWORD = "Senha inválida!!"

INVALID_DESCRIPTION = "Informe uma descrição válida."
INVALID_MONTH = "Informe um mês válido."
INVALID_YEAR = "Informe um ano válido."
MISSING_USER = "Informe um usuário.."
INVALID_AMOUNT = "Informe um valor válido.."
MISSING_TYPE = "Informe um tipo de lançamento."

UNSAVED_UPDATE = "cannot update an unsaved release"
UNSAVED_DELETE = "cannot delete an unsaved release"
