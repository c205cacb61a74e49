"""Tests for registration and authentication."""

import pytest
from unittest.mock import create_autospec

from bookkeeper.errors import AuthenticationError, BusinessRuleError
from bookkeeper.models import User
from bookkeeper.services import UserService
from bookkeeper.services.storage import DuplicateError, StorageInterface

from factories import make_user


@pytest.fixture
def service(storage):
    return UserService(storage)


@pytest.fixture
def mock_storage():
    return create_autospec(StorageInterface, instance=True)


class TestRegister:
    """Tests for UserService.register."""

    def test_register_assigns_id(self, service):
        """Test registering on an empty store."""
        user = service.register(User(name="ana", email="a@x", password="pw"))
        assert user.id is not None
        assert user.name == "ana"
        assert user.registered_on is not None

    def test_register_duplicate_email_fails(self, service, storage):
        """Test that the second registration with an email is refused."""
        first = service.register(User(name="ana", email="a@x", password="pw"))

        with pytest.raises(BusinessRuleError) as exc_info:
            service.register(User(name="ana2", email="a@x", password="q"))

        assert exc_info.value.message == "Já existe um usuario cadastrado com esse email."
        stored = storage.find_user_by_email("a@x")
        assert stored.id == first.id
        assert stored.name == "ana"
        assert stored.password == "pw"

    def test_email_is_case_sensitive(self, service):
        """Test that emails differing only in case are distinct accounts."""
        service.register(User(name="ana", email="a@x", password="pw"))
        other = service.register(User(name="Ana", email="A@x", password="pw"))
        assert other.id is not None

    def test_register_never_saves_when_email_taken(self, mock_storage):
        """Test that a failed check does not reach save_user."""
        mock_storage.exists_user_by_email.return_value = True
        service = UserService(mock_storage)

        with pytest.raises(BusinessRuleError):
            service.register(make_user())

        mock_storage.save_user.assert_not_called()

    def test_register_runs_in_one_transaction(self, mock_storage):
        """Test that check and insert happen inside transaction()."""
        mock_storage.exists_user_by_email.return_value = False
        mock_storage.save_user.return_value = make_user(id=1)
        service = UserService(mock_storage)

        saved = service.register(make_user())

        assert saved.id == 1
        mock_storage.transaction.assert_called_once_with()
        mock_storage.transaction.return_value.__enter__.assert_called_once()
        mock_storage.save_user.assert_called_once()

    def test_duplicate_key_from_storage_becomes_business_rule(self, mock_storage):
        """Test the race where the check passes but the insert collides."""
        mock_storage.exists_user_by_email.return_value = False
        mock_storage.save_user.side_effect = DuplicateError("unique constraint")
        service = UserService(mock_storage)

        with pytest.raises(BusinessRuleError) as exc_info:
            service.register(make_user())

        assert exc_info.value.message == "Já existe um usuario cadastrado com esse email."
        assert isinstance(exc_info.value.__cause__, DuplicateError)


class TestValidateEmail:
    """Tests for UserService.validate_email."""

    def test_free_email_passes(self, service):
        service.validate_email("email@email.com")

    def test_taken_email_fails(self, service, storage):
        storage.save_user(make_user(email="email@email.com"))
        with pytest.raises(BusinessRuleError):
            service.validate_email("email@email.com")


class TestAuthenticate:
    """Tests for UserService.authenticate."""

    def test_unknown_email(self, service):
        """Test authenticating on an empty store."""
        with pytest.raises(AuthenticationError) as exc_info:
            service.authenticate("nobody@x", "pw")
        assert exc_info.value.message == "Usuario não encontrado para o email informado!!"

    def test_wrong_password(self, service):
        """Test that a mismatching password is refused."""
        service.register(User(name="ana", email="a@x", password="pw"))
        with pytest.raises(AuthenticationError) as exc_info:
            service.authenticate("a@x", "wrong")
        assert exc_info.value.message == "Senha inválida!!"

    def test_password_compared_verbatim(self, service):
        """Test that no trimming or case folding happens."""
        service.register(User(name="ana", email="a@x", password="pw"))
        with pytest.raises(AuthenticationError):
            service.authenticate("a@x", "PW")
        with pytest.raises(AuthenticationError):
            service.authenticate("a@x", " pw")

    def test_authenticate_is_repeatable(self, service, storage):
        """Test that repeated logins return the same record and change nothing."""
        registered = service.register(User(name="ana", email="a@x", password="pw"))

        first = service.authenticate("a@x", "pw")
        second = service.authenticate("a@x", "pw")

        assert first == second
        assert first.id == registered.id
        assert storage.find_user_by_email("a@x") == registered

    def test_authenticate_does_not_write(self, mock_storage):
        """Test that authentication only reads."""
        mock_storage.find_user_by_email.return_value = make_user(id=1)
        service = UserService(mock_storage)

        result = service.authenticate("usuario@email.com", "senha")

        assert result.id == 1
        mock_storage.save_user.assert_not_called()
        mock_storage.transaction.assert_not_called()
