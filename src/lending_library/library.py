"""
Lending engine for the Lending Library.

``LendingLibrary`` enforces the catalog and circulation rules on top of a
``LibraryRepository``:

- A book's bibliographic data never changes; re-adding an isbn only adds
  copies, and only when every other field matches.
- A checkout takes one copy and a return gives it back. A patron may hold
  at most one copy of a title.
- Compound changes (checkout record plus copy count) are applied in one
  repository transaction so no reader sees half of them.

Every request is validated before anything is read or written. Failures
are raised as ``LibraryError`` subclasses; storage errors propagate as
``RepositoryException`` without retry.
"""

import logging
from typing import Any

from .config import get_config
from .database.memory_repository import InMemoryLibraryRepository
from .database.repository import LibraryRepository
from .errors import (
    BusinessRuleError,
    DuplicateError,
    InsufficientCopiesError,
    NotFoundError,
)
from .models import DEFAULT_COUNT, Book, BookRecord, Lend, SearchQuery
from .observability import record_circulation_event, record_copies_added, trace_operation
from .validation import validate

logger = logging.getLogger(__name__)


def _no_book(isbn: str) -> BusinessRuleError:
    return BusinessRuleError(f"no book for isbn '{isbn}'", widget="isbn")


def _no_copies(isbn: str) -> BusinessRuleError:
    return BusinessRuleError(f"not enough copies for book '{isbn}'", widget="isbn")


def _already_checked_out(lend: Lend) -> BusinessRuleError:
    return BusinessRuleError(
        f"patron {lend.patron_id} already has book {lend.isbn} checked out", widget="isbn"
    )


def _not_checked_out(lend: Lend) -> BusinessRuleError:
    return BusinessRuleError(
        f"patron {lend.patron_id} does not have book {lend.isbn} checked out", widget="isbn"
    )


def _isbn_request(isbn: Any) -> dict[str, Any]:
    # A null isbn is reported as a missing field
    return {} if isbn is None else {"isbn": isbn}


class LendingLibrary:
    """Catalog and circulation operations over a repository."""

    def __init__(self, repository: LibraryRepository, default_count: int = DEFAULT_COUNT):
        """
        Args:
            repository: Storage for books and checkouts
            default_count: Result count for searches that do not give one
        """
        self.repository = repository
        self.default_count = default_count

    @trace_operation("clear")
    def clear(self) -> None:
        """Remove every book and checkout."""
        self.repository.clear()
        logger.info("Library cleared")

    @trace_operation("add_book")
    def add_book(self, request: Any) -> BookRecord:
        """
        Add copies of a book to the catalog.

        A new isbn is stored with ``nCopies`` copies (default 1). For a known
        isbn the incoming copies are added to the stored count, provided the
        title, authors, pages, year and publisher all match.

        Raises:
            RequestValidationError: If the request is malformed
            BusinessRuleError: If an immutable field differs from the stored book
        """
        book = validate("addBook", request)
        n_copies = book.n_copies or 1

        try:
            existing = self.repository.get_by_isbn(book.isbn)
        except NotFoundError:
            try:
                record = self.repository.add(book.to_record(n_copies))
            except DuplicateError:
                # Lost an insert race with another add of the same isbn
                logger.info("Book %s added concurrently, merging copies", book.isbn)
                record = self._add_copies(book, self.repository.get_by_isbn(book.isbn), n_copies)
            else:
                logger.info("Added new book %s with %d copies", book.isbn, n_copies)
        else:
            record = self._add_copies(book, existing, n_copies)

        record_copies_added(book.isbn, n_copies)
        return record

    def _add_copies(self, book: Book, existing: BookRecord, n_copies: int) -> BookRecord:
        field = book.inconsistent_field(existing)
        if field is not None:
            raise BusinessRuleError(f"inconsistent {field} data for book {book.isbn}", widget=field)

        self.repository.adjust_copy_count(book.isbn, n_copies)
        logger.info("Added %d copies of existing book %s", n_copies, book.isbn)
        return self.repository.get_by_isbn(book.isbn)

    @trace_operation("get_book")
    def get_book(self, isbn: Any) -> BookRecord:
        """
        Raises:
            RequestValidationError: If isbn is missing or malformed
            NotFoundError: If no book has this isbn
        """
        request = validate("getBook", _isbn_request(isbn))
        return self.repository.get_by_isbn(request.isbn)

    @trace_operation("find_books")
    def find_books(self, request: Any) -> list[BookRecord]:
        """
        Find books whose title and authors contain every search word.

        Words are runs of two or more word characters, matched without
        regard to case. Results are sorted by title then isbn and sliced
        to ``[index, index + count)``.
        """
        find = validate("findBooks", request)
        query = SearchQuery.from_request(find)
        if "count" not in find.model_fields_set:
            query = query.model_copy(update={"count": self.default_count})

        return self.repository.search(query)

    @trace_operation("checkout_book")
    def checkout_book(self, request: Any) -> None:
        """
        Lend one copy of a book to a patron.

        Raises:
            RequestValidationError: If the request is malformed
            BusinessRuleError: If the book is unknown, has no copies left, or
                is already checked out by this patron
        """
        lend = validate("checkoutBook", request)

        try:
            book = self.repository.get_by_isbn(lend.isbn)
        except NotFoundError as e:
            raise _no_book(lend.isbn) from e
        if book.n_copies < 1:
            raise _no_copies(lend.isbn)
        if self.repository.get_checkout(lend.patron_id, lend.isbn) is not None:
            raise _already_checked_out(lend)

        # The checks above can go stale under concurrency; the repository
        # rejects the duplicate insert or the negative count regardless.
        try:
            with self.repository.transaction():
                self.repository.insert_checkout(lend)
                self.repository.adjust_copy_count(lend.isbn, -1)
        except DuplicateError as e:
            raise _already_checked_out(lend) from e
        except InsufficientCopiesError as e:
            raise _no_copies(lend.isbn) from e
        except NotFoundError as e:
            raise _no_book(lend.isbn) from e

        logger.info("Patron %s checked out %s", lend.patron_id, lend.isbn)
        record_circulation_event("checkout", lend.isbn)

    @trace_operation("return_book")
    def return_book(self, request: Any) -> None:
        """
        Take back a copy a patron has checked out.

        Raises:
            RequestValidationError: If the request is malformed
            BusinessRuleError: If the book is unknown or the patron does not
                have it checked out
        """
        lend = validate("returnBook", request)

        try:
            self.repository.get_by_isbn(lend.isbn)
        except NotFoundError as e:
            raise _no_book(lend.isbn) from e
        if self.repository.get_checkout(lend.patron_id, lend.isbn) is None:
            raise _not_checked_out(lend)

        try:
            with self.repository.transaction():
                if not self.repository.delete_checkout(lend):
                    raise _not_checked_out(lend)
                self.repository.adjust_copy_count(lend.isbn, 1)
        except NotFoundError as e:
            raise _no_book(lend.isbn) from e

        logger.info("Patron %s returned %s", lend.patron_id, lend.isbn)
        record_circulation_event("return", lend.isbn)

    @trace_operation("find_lendings")
    def find_lendings(self, isbn: Any) -> list[Lend]:
        """Return the current checkouts of a book, ordered by patron id."""
        request = validate("findLendings", _isbn_request(isbn))
        return self.repository.get_checkouts_by_isbn(request.isbn)


def make_lending_library(repository: LibraryRepository | None = None) -> LendingLibrary:
    """
    Create a lending library using the configured search count.

    Args:
        repository: Storage to use; a fresh in-memory repository if None
    """
    if repository is None:
        repository = InMemoryLibraryRepository()
    return LendingLibrary(repository, get_config().default_search_count)
