"""
Component Wiring for Bookkeeper

Plain constructor wiring: build one storage, hand it to both services.
No container, no globals - callers keep the returned objects.
"""

from typing import Optional

from bookkeeper.config import get_settings
from bookkeeper.logs import configure_logging, get_logger
from bookkeeper.services import (
    ReleaseService,
    SqlClient,
    SqlStorage,
    StorageInterface,
    UserService,
)


logger = get_logger(__name__)


def create_app_components(
    storage: Optional[StorageInterface] = None,
) -> tuple[UserService, ReleaseService, StorageInterface]:
    """
    Factory function to create all application components.

    Args:
        storage: Storage to use. If None, the relational storage is
                 built from settings and its schema is created.

    Returns:
        (user_service, release_service, storage)

    Raises:
        StorageConnectionError: If the configured database is unreachable
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, json=app_settings.log_json)

    if storage is None:
        sql_storage = SqlStorage(SqlClient(settings.database))
        sql_storage.initialize()
        storage = sql_storage

    logger.info(
        "components_created",
        storage=type(storage).__name__,
        environment=app_settings.app_environment,
    )

    return UserService(storage), ReleaseService(storage), storage
