"""
Database session management for the Lending Library.

Sessions are short-lived: each request opens one through ``session_scope``
and it is committed or rolled back when the request finishes. Driver
errors are translated into the library's own exceptions by
``safe_query`` and ``safe_commit`` so callers never see SQLAlchemy types.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..errors import DuplicateError, RepositoryException
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


class DatabaseManager:
    """
    Manages database connections and sessions.

    - Lazily creates the engine and session factory
    - One shared connection for in-memory SQLite, a pool otherwise
    - Foreign keys enforced on SQLite
    """

    def __init__(self, database_url: str | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses the configured one.
        """
        if database_url is None:
            database_url = get_config().get_database_url()
            logger.info("Using configured database: %s", database_url)

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                if _is_memory_url(self.database_url):
                    # An in-memory database only lives as long as its connection
                    self._engine = create_engine(
                        self.database_url,
                        poolclass=StaticPool,
                        connect_args={"check_same_thread": False},
                        echo=False,
                    )
                else:
                    # One connection per session so concurrent requests wait
                    # on SQLite's write lock instead of sharing a transaction
                    self._engine = create_engine(
                        self.database_url,
                        connect_args={"check_same_thread": False, "timeout": 30},
                        echo=False,
                    )

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    if not _is_memory_url(self.database_url):
                        # Readers never block the single writer
                        cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.close()
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session; the caller must close it."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            repo = SqlLibraryRepository(session)
            ...
        # Session is automatically committed or rolled back
        ```
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.debug("Rolling back database session")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Create the schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the global database manager instance.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603 - Singleton pattern for database manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def reset_db_manager() -> None:
    """Close and forget the global database manager."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Transactional session from the global manager."""
    with get_db_manager().session_scope() as session:
        yield session


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit a session, translating driver errors.

    Args:
        session: The database session
        operation: Description of the operation (for error messages)

    Raises:
        DuplicateError: If the commit violates a constraint
        RepositoryException: On any other database error
    """
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateError(f"Database operation '{operation}' violates a constraint") from e
    except (SQLAlchemyError, OverflowError) as e:
        session.rollback()
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e


def safe_flush(session: Session, operation: str) -> None:
    """Flush pending changes without committing, translating driver errors."""
    try:
        session.flush()
    except IntegrityError as e:
        raise DuplicateError(f"Database operation '{operation}' violates a constraint") from e
    except (SQLAlchemyError, OverflowError) as e:
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, translating driver errors.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Error message prefix

    Raises:
        RepositoryException: If the query fails
    """
    try:
        return query_func(session)
    # sqlite3 raises OverflowError for integers outside the 64-bit range
    except (SQLAlchemyError, OverflowError) as e:
        logger.exception("Query failed")
        raise RepositoryException(f"{error_msg}: Database query failed") from e
