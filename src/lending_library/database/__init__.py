"""
Database layer for the Lending Library.

- schema: SQLAlchemy tables for books and checkouts
- session: engine and session management
- repository: the storage contract the lending engine uses
- sql_repository / memory_repository: its two implementations
- seed: fixture loading and fake catalog generation
"""

from .memory_repository import InMemoryLibraryRepository
from .repository import LibraryRepository
from .schema import Base
from .schema import Book as BookDB
from .schema import BookCheckout as CheckoutDB
from .session import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    session_scope,
)
from .sql_repository import SqlLibraryRepository

__all__ = [
    "Base",
    "BookDB",
    "CheckoutDB",
    "DatabaseManager",
    "InMemoryLibraryRepository",
    "LibraryRepository",
    "SqlLibraryRepository",
    "get_db_manager",
    "reset_db_manager",
    "session_scope",
]
