"""
Relational Storage Implementation (SQLAlchemy)

DESIGN DECISION: The relational store keeps its own persistence records
(UserRecord, ReleaseRecord). Services never see them - every method maps
rows to and from the pydantic domain records at the boundary.

TRADEOFFS:
- One session per call keeps the services stateless
- `transaction()` shares one session between the calls of the current
  thread so registration's check-then-insert commits atomically
- The unique constraint on users.email is the final arbiter on duplicates

Any database SQLAlchemy can talk to works; SQLite is the default.
"""

import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy import (
    Date,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
    delete,
    event,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool
from tenacity import (
    Retrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bookkeeper.config import DatabaseSettings, get_settings
from bookkeeper.logs import get_logger
from bookkeeper.models.release import (
    Release,
    ReleaseFilter,
    ReleaseStatus,
    ReleaseType,
)
from bookkeeper.models.user import User
from bookkeeper.services.storage.interface import (
    DuplicateError,
    StorageConnectionError,
    StorageError,
    StorageInterface,
    check_amount_scale,
)


logger = get_logger(__name__)


# =============================================================================
# PERSISTENCE RECORDS
# =============================================================================

class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    """Row of the users table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(String(150))
    email: Mapped[Optional[str]] = mapped_column(String(100), unique=True, index=True)
    password: Mapped[Optional[str]] = mapped_column(String(100))
    registered_on: Mapped[date] = mapped_column(Date, nullable=False)

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, email={self.email})>"


class ReleaseRecord(Base):
    """Row of the releases table."""

    __tablename__ = "releases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[Optional[str]] = mapped_column(String(100))
    month: Mapped[Optional[int]] = mapped_column(Integer)
    year: Mapped[Optional[int]] = mapped_column(Integer)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(16, 2))
    type: Mapped[Optional[ReleaseType]] = mapped_column(
        Enum(ReleaseType, native_enum=False, length=20)
    )
    status: Mapped[Optional[ReleaseStatus]] = mapped_column(
        Enum(ReleaseStatus, native_enum=False, length=20)
    )
    created_on: Mapped[date] = mapped_column(Date, nullable=False)

    def __repr__(self) -> str:
        return f"<ReleaseRecord(id={self.id}, user_id={self.user_id}, status={self.status})>"


# =============================================================================
# CONNECTION
# =============================================================================

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class SqlClient:
    """
    Low-level database client wrapper.

    Owns the SQLAlchemy engine and session factory, and retries the
    initial connection with exponential backoff.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None):
        self._settings = settings or get_settings().database
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    def _create_engine(self) -> Engine:
        url = self._settings.url
        kwargs = {"echo": self._settings.echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection, otherwise each session sees its own empty database
                kwargs["poolclass"] = StaticPool

        engine = create_engine(url, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    def connect(self) -> Engine:
        """
        Establish the database connection.

        Raises:
            StorageConnectionError: If the database stays unreachable
        """
        if self._engine is not None:
            return self._engine

        engine = self._create_engine()
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._settings.connect_retries),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                retry=retry_if_exception_type(OperationalError),
                reraise=True,
            ):
                with attempt:
                    logger.info(
                        "database_connect",
                        attempt=attempt.retry_state.attempt_number,
                        dialect=engine.dialect.name,
                    )
                    with engine.connect() as conn:
                        conn.execute(text("SELECT 1"))
        except (OperationalError, RetryError) as e:
            engine.dispose()
            logger.error("database_unreachable", error=str(e))
            raise StorageConnectionError(f"Failed to connect to database: {e}") from e

        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        return engine

    def session(self) -> Session:
        """Open a new session, connecting first if needed."""
        if self._sessions is None:
            self.connect()
        return self._sessions()

    def create_schema(self) -> None:
        """Create the tables if they do not already exist."""
        engine = self.connect()
        Base.metadata.create_all(engine)
        logger.info("database_schema_ready", tables=sorted(Base.metadata.tables))

    def dispose(self) -> None:
        """Close every pooled connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessions = None


# =============================================================================
# STORAGE
# =============================================================================

class SqlStorage(StorageInterface):
    """
    SQLAlchemy implementation of the storage contract.

    Backend exceptions are wrapped into StorageError; a unique-email
    violation becomes DuplicateError.
    """

    def __init__(self, client: Optional[SqlClient] = None):
        self._client = client or SqlClient()
        self._local = threading.local()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""
        self._client.create_schema()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def _active_session(self) -> Optional[Session]:
        return getattr(self._local, "session", None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._active_session() is not None:
            # Nested block joins the outer transaction
            yield
            return

        session = self._client.session()
        self._local.session = session
        try:
            yield
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise self._translate(e, "commit") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            self._local.session = None
            session.close()

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        """
        Session for a single gateway call.

        Inside `transaction()` the shared session is used and left open;
        otherwise a fresh one is committed and closed here.
        """
        active = self._active_session()
        try:
            if active is not None:
                yield active
                return

            session = self._client.session()
            try:
                yield session
                session.commit()
            except BaseException:
                session.rollback()
                raise
            finally:
                session.close()
        except SQLAlchemyError as e:
            raise self._translate(e, action) from e

    def _translate(self, error: SQLAlchemyError, action: str) -> StorageError:
        logger.error("storage_operation_failed", action=action, error=str(error))
        if isinstance(error, IntegrityError) and "email" in str(error.orig).lower():
            return DuplicateError(f"Failed to {action}: email already registered")
        if isinstance(error, OperationalError):
            return StorageConnectionError(f"Failed to {action}: {error}")
        return StorageError(f"Failed to {action}: {error}")

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------
    def _user_to_record(self, user: User) -> UserRecord:
        return UserRecord(
            id=user.id,
            name=user.name,
            email=user.email,
            password=user.password,
            registered_on=user.registered_on or date.today(),
        )

    def _record_to_user(self, record: UserRecord) -> User:
        return User(
            id=record.id,
            name=record.name,
            email=record.email,
            password=record.password,
            registered_on=record.registered_on,
        )

    def _release_to_record(self, release: Release) -> ReleaseRecord:
        return ReleaseRecord(
            id=release.id,
            description=release.description,
            month=release.month,
            year=release.year,
            user_id=release.user_id,
            amount=release.amount,
            type=release.type,
            status=release.status,
            created_on=release.created_on or date.today(),
        )

    def _record_to_release(self, record: ReleaseRecord) -> Release:
        return Release(
            id=record.id,
            description=record.description,
            month=record.month,
            year=record.year,
            user_id=record.user_id,
            amount=record.amount,
            type=record.type,
            status=record.status,
            created_on=record.created_on,
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def save_user(self, user: User) -> User:
        with self._session("save user") as session:
            record = session.merge(self._user_to_record(user))
            session.flush()
            return self._record_to_user(record)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._session("find user") as session:
            record = session.scalars(
                select(UserRecord).where(UserRecord.email == email)
            ).first()
            return self._record_to_user(record) if record else None

    def exists_user_by_email(self, email: str) -> bool:
        with self._session("check email") as session:
            count = session.scalar(
                select(func.count()).select_from(UserRecord).where(UserRecord.email == email)
            )
            return bool(count)

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        with self._session("find user") as session:
            record = session.get(UserRecord, user_id)
            return self._record_to_user(record) if record else None

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------
    def save_release(self, release: Release) -> Release:
        check_amount_scale(release)
        with self._session("save release") as session:
            record = session.merge(self._release_to_record(release))
            session.flush()
            return self._record_to_release(record)

    def delete_release(self, release: Release) -> None:
        if release.id is None:
            raise StorageError("Failed to delete release: release has no id")
        with self._session("delete release") as session:
            session.execute(delete(ReleaseRecord).where(ReleaseRecord.id == release.id))

    def find_release_by_id(self, release_id: int) -> Optional[Release]:
        with self._session("find release") as session:
            record = session.get(ReleaseRecord, release_id)
            return self._record_to_release(record) if record else None

    def find_releases_matching(self, release_filter: ReleaseFilter) -> list[Release]:
        stmt = select(ReleaseRecord)
        for field, value in release_filter.criteria().items():
            stmt = stmt.where(getattr(ReleaseRecord, field) == value)

        with self._session("search releases") as session:
            return [self._record_to_release(record) for record in session.scalars(stmt)]

    def sum_release_amount(
        self,
        user_id: int,
        release_type: ReleaseType,
        status: ReleaseStatus,
    ) -> Decimal:
        stmt = select(func.sum(ReleaseRecord.amount)).where(
            ReleaseRecord.user_id == user_id,
            ReleaseRecord.type == release_type,
            ReleaseRecord.status == status,
        )
        with self._session("sum releases") as session:
            total = session.scalar(stmt)
        if total is None:
            return Decimal("0")
        return Decimal(str(total))
