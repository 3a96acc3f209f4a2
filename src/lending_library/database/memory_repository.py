"""
In-memory implementation of the persistence port.

State lives in two dictionaries guarded by one re-entrant lock, so every
operation is serialized. ``transaction()`` holds the lock for the whole
block and restores a snapshot if the block raises.
"""

import copy
import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

from ..errors import DuplicateError, InsufficientCopiesError, NotFoundError
from ..models import BookRecord, Lend, SearchQuery
from ..models.fields import MAX_INTEGER
from ..models.query import catalog_words
from .repository import LibraryRepository, too_many_copies

logger = logging.getLogger(__name__)


class InMemoryLibraryRepository(LibraryRepository):
    """Library storage held in process memory."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._books: dict[str, BookRecord] = {}
        self._checkouts: dict[tuple[str, str], Lend] = {}
        self._depth = 0

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        with self._lock:
            snapshot = (copy.deepcopy(self._books), dict(self._checkouts))
            self._depth += 1
            try:
                yield
            except Exception:
                # Only the outermost block restores; inner failures propagate to it
                if self._depth == 1:
                    logger.debug("Rolling back in-memory transaction")
                    self._books, self._checkouts = snapshot
                raise
            finally:
                self._depth -= 1

    def clear(self) -> None:
        with self._lock:
            self._books.clear()
            self._checkouts.clear()

    def add(self, book: BookRecord) -> BookRecord:
        with self._lock:
            if book.isbn in self._books:
                raise DuplicateError(f"book {book.isbn} already exists", widget="isbn")
            self._books[book.isbn] = book.model_copy(deep=True)
            return book.model_copy(deep=True)

    def get_by_isbn(self, isbn: str) -> BookRecord:
        with self._lock:
            book = self._books.get(isbn)
            if book is None:
                raise NotFoundError(f"no book for isbn '{isbn}'", widget="isbn")
            return book.model_copy(deep=True)

    def search(self, query: SearchQuery) -> list[BookRecord]:
        with self._lock:
            matches = [
                book
                for book in self._books.values()
                if query.matches(set(catalog_words(book.title, book.authors)))
            ]
            matches.sort(key=lambda book: (book.title, book.isbn))
            window = matches[query.index : query.index + query.count]
            return [book.model_copy(deep=True) for book in window]

    def get_checkout(self, patron_id: str, isbn: str) -> Lend | None:
        with self._lock:
            return self._checkouts.get((isbn, patron_id))

    def insert_checkout(self, lend: Lend) -> None:
        with self._lock:
            key = (lend.isbn, lend.patron_id)
            if key in self._checkouts:
                raise DuplicateError(
                    f"patron {lend.patron_id} already has book {lend.isbn} checked out",
                    widget="isbn",
                )
            self._checkouts[key] = lend

    def delete_checkout(self, lend: Lend) -> bool:
        with self._lock:
            return self._checkouts.pop((lend.isbn, lend.patron_id), None) is not None

    def adjust_copy_count(self, isbn: str, delta: int) -> None:
        with self._lock:
            book = self._books.get(isbn)
            if book is None:
                raise NotFoundError(f"no book for isbn '{isbn}'", widget="isbn")
            if book.n_copies + delta < 0:
                raise InsufficientCopiesError(f"not enough copies for book '{isbn}'", widget="isbn")
            if book.n_copies + delta > MAX_INTEGER:
                raise too_many_copies(isbn)
            self._books[isbn] = book.model_copy(update={"n_copies": book.n_copies + delta})

    def get_checkouts_by_isbn(self, isbn: str) -> list[Lend]:
        with self._lock:
            lends = [lend for (key_isbn, _), lend in self._checkouts.items() if key_isbn == isbn]
            return sorted(lends, key=lambda lend: lend.patron_id)
