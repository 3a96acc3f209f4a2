"""Test configuration and fixtures for the Lending Library.

1. Isolated test databases - each test gets its own SQLite file
2. Configuration overrides - tests never read the developer's settings
3. Backend parametrization - engine and repository tests run against
   both the in-memory and the SQL repository
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from lending_library.config import LibraryConfig, _ConfigStore, reset_config
from lending_library.database import (
    DatabaseManager,
    InMemoryLibraryRepository,
    LibraryRepository,
    SqlLibraryRepository,
    reset_db_manager,
)
from lending_library.database.seed import load_books, seed_books
from lending_library.library import LendingLibrary
from lending_library.observability import ObservabilityConfig, initialize_observability

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(scope="session", autouse=True)
def observability() -> None:
    """Configure logfire once, keeping all telemetry local."""
    initialize_observability(
        ObservabilityConfig(environment="test", send_to_logfire=False, console_output=False)
    )


# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_library.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def db_manager(test_database_url: str) -> Generator[DatabaseManager, None, None]:
    """Database manager over a freshly created file database."""
    manager = DatabaseManager(test_database_url)
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def test_db_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(params=["memory", "sql"])
def repository(request) -> LibraryRepository:
    """Each backend in turn."""
    if request.param == "memory":
        return InMemoryLibraryRepository()
    return SqlLibraryRepository(request.getfixturevalue("test_db_session"))


@pytest.fixture
def library(repository: LibraryRepository) -> LendingLibrary:
    return LendingLibrary(repository)


@pytest.fixture
def book_requests() -> list[dict]:
    """The addBook requests in tests/data/books.json."""
    return load_books(DATA_DIR / "books.json")


@pytest.fixture
def seeded_library(library: LendingLibrary, book_requests: list[dict]) -> LendingLibrary:
    seed_books(library, book_requests)
    return library


# === Configuration Fixtures ===


@pytest.fixture
def test_config(test_db_path: Path, monkeypatch) -> Generator[LibraryConfig, None, None]:
    """Install a test configuration as the global one."""
    reset_config()
    config = LibraryConfig(
        server_name="test-lending-library",
        server_version="0.0.1-test",
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
    )
    monkeypatch.setattr(_ConfigStore, "_instance", config)

    yield config

    reset_config()


@pytest.fixture
def mock_session_scope(test_db_session: Session, test_config: LibraryConfig, monkeypatch) -> Session:  # noqa: ARG001
    """Make the tool handlers use the test session.

    The handlers then see data the test creates, and the test sees what the
    handlers write.
    """

    @contextmanager
    def _mock_session_scope():
        yield test_db_session

    monkeypatch.setattr("lending_library.tools.common.session_scope", _mock_session_scope)
    return test_db_session


# === Environment Fixtures ===


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide an environment without LENDING_LIBRARY_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LENDING_LIBRARY_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset global configuration and database state after each test."""
    yield

    reset_config()
    reset_db_manager()
