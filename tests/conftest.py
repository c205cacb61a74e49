"""Shared fixtures: both storage implementations, and a saved owner."""

import pytest

from bookkeeper.config import DatabaseSettings, get_settings
from bookkeeper.services.storage import InMemoryStorage, SqlClient, SqlStorage

from factories import make_user


def _sql_storage() -> tuple[SqlStorage, SqlClient]:
    client = SqlClient(DatabaseSettings(url="sqlite://", connect_retries=1))
    storage = SqlStorage(client)
    storage.initialize()
    return storage, client


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def sql_storage():
    storage, client = _sql_storage()
    yield storage
    client.dispose()


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Run a test once against each storage implementation."""
    if request.param == "memory":
        yield InMemoryStorage()
        return
    storage, client = _sql_storage()
    yield storage
    client.dispose()


@pytest.fixture
def owner(storage):
    """A user saved in `storage`, to own releases."""
    return storage.save_user(make_user())


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
