"""
Persistence port for the Lending Library.

``LibraryRepository`` is the contract the lending engine is written
against. It has no business rules of its own; it stores books by isbn and
checkout records by (patron, isbn), and it provides the two guarantees the
engine cannot provide itself:

1. **Atomicity**: writes made inside ``transaction()`` become visible
   together or not at all.
2. **Serialization per isbn**: ``adjust_copy_count`` is a conditional
   update that refuses to take a copy count below zero, and
   ``insert_checkout`` refuses a second checkout of the same (isbn, patron).

Implementations:
- ``SqlLibraryRepository``: SQLAlchemy, for real deployments
- ``InMemoryLibraryRepository``: dictionaries behind a lock, for tests

Every method may raise ``RepositoryException`` on storage failure.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from ..errors import DuplicateError, InsufficientCopiesError, NotFoundError, RepositoryException
from ..models import BookRecord, Lend, SearchQuery


def too_many_copies(isbn: str) -> RepositoryException:
    return RepositoryException(f"copy count for book '{isbn}' would overflow", widget="isbn")


class LibraryRepository(ABC):
    """Abstract storage for books and checkout records."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """
        Group writes into one atomic unit.

        Writes made inside the block are committed when it exits normally
        and rolled back if it raises. Nested blocks join the outer one.
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove every book and checkout record."""

    @abstractmethod
    def add(self, book: BookRecord) -> BookRecord:
        """
        Insert a new book.

        Raises:
            DuplicateError: If a book with the same isbn exists
        """

    @abstractmethod
    def get_by_isbn(self, isbn: str) -> BookRecord:
        """
        Read a book, always fresh from storage.

        Raises:
            NotFoundError: If there is no book with this isbn
        """

    @abstractmethod
    def search(self, query: SearchQuery) -> list[BookRecord]:
        """
        Find books whose title and author words include every query term.

        Results are sorted by title then isbn, and only the
        ``[query.index, query.index + query.count)`` slice is returned.
        Sorting and slicing happen in storage.
        """

    @abstractmethod
    def get_checkout(self, patron_id: str, isbn: str) -> Lend | None:
        """Return the checkout of ``isbn`` held by ``patron_id``, if any."""

    @abstractmethod
    def insert_checkout(self, lend: Lend) -> None:
        """
        Record a checkout.

        Raises:
            DuplicateError: If the patron already holds this isbn
        """

    @abstractmethod
    def delete_checkout(self, lend: Lend) -> bool:
        """Remove a checkout; return False if there was none to remove."""

    @abstractmethod
    def adjust_copy_count(self, isbn: str, delta: int) -> None:
        """
        Add ``delta`` to the copy count of a book.

        Raises:
            NotFoundError: If there is no book with this isbn
            InsufficientCopiesError: If the result would be negative
            RepositoryException: If the result would not fit a 64-bit integer
        """

    @abstractmethod
    def get_checkouts_by_isbn(self, isbn: str) -> list[Lend]:
        """Return every checkout of ``isbn``, ordered by patron id."""


__all__ = [
    "DuplicateError",
    "InsufficientCopiesError",
    "LibraryRepository",
    "NotFoundError",
    "RepositoryException",
]
