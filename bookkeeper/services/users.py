"""
User Service

Registration with email uniqueness, and the credential handshake.

DESIGN DECISION: Registration runs the uniqueness check and the insert
inside one storage transaction. Under contention the storage's unique
constraint still decides; its DuplicateError is reported exactly like a
failed check, so callers see one message for both cases.
"""

from bookkeeper.errors import (
    DUPLICATE_EMAIL,
    INVALID_PASSWORD,
    USER_NOT_FOUND,
    AuthenticationError,
    BusinessRuleError,
)
from bookkeeper.models.user import User
from bookkeeper.services.storage import DuplicateError, StorageInterface


class UserService:
    """Registers and authenticates users against the injected storage."""

    def __init__(self, storage: StorageInterface):
        self._storage = storage

    def register(self, user: User) -> User:
        """
        Register a new user.

        Raises:
            BusinessRuleError: If the email is already registered
            StorageError: If storage fails
        """
        try:
            with self._storage.transaction():
                self.validate_email(user.email)
                return self._storage.save_user(user)
        except DuplicateError as e:
            raise BusinessRuleError(DUPLICATE_EMAIL) from e

    def authenticate(self, email: str, password: str) -> User:
        """
        Return the user owning these credentials.

        The stored password is compared verbatim. Nothing is mutated.

        Raises:
            AuthenticationError: Unknown email, or wrong password
        """
        user = self._storage.find_user_by_email(email)
        if user is None:
            raise AuthenticationError(USER_NOT_FOUND)
        if user.password != password:
            raise AuthenticationError(INVALID_PASSWORD)
        return user

    def validate_email(self, email: str) -> None:
        """Raise BusinessRuleError if some user already has this email."""
        if self._storage.exists_user_by_email(email):
            raise BusinessRuleError(DUPLICATE_EMAIL)
