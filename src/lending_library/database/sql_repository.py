"""
SQLAlchemy implementation of the persistence port.

Reads always repopulate ORM objects from the database
(``populate_existing``) so a record read twice in one session reflects
changes made by other sessions in between.

Outside ``transaction()`` every write commits on its own. Inside it,
writes are only flushed, so constraint violations still surface at the
write that caused them, and the whole block commits at the end.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from ..errors import DuplicateError, InsufficientCopiesError, NotFoundError
from ..models import BookRecord, Lend, SearchQuery
from ..models.fields import MAX_INTEGER
from ..models.query import catalog_words
from .repository import LibraryRepository, too_many_copies
from .schema import Book as BookDB
from .schema import BookCheckout as CheckoutDB
from .session import safe_commit, safe_flush, safe_query

logger = logging.getLogger(__name__)


def search_text(title: str, authors: list[str]) -> str:
    """Space-padded word list stored in ``books.search_text``."""
    return f" {' '.join(catalog_words(title, authors))} "


def _like_word(term: str) -> str:
    # "_" is a word character as well as a LIKE wildcard
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"% {escaped} %"


class SqlLibraryRepository(LibraryRepository):
    """Library storage backed by a SQLAlchemy session."""

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
        except Exception:
            logger.debug("Rolling back library transaction")
            self.session.rollback()
            raise
        else:
            safe_commit(self.session, "library transaction")
        finally:
            self._in_transaction = False

    def _write(self, operation: str) -> None:
        if self._in_transaction:
            safe_flush(self.session, operation)
        else:
            safe_commit(self.session, operation)

    def clear(self) -> None:
        safe_query(self.session, lambda s: s.execute(delete(CheckoutDB)), "Failed to clear checkouts")
        safe_query(self.session, lambda s: s.execute(delete(BookDB)), "Failed to clear books")
        self._write("clear library")
        # Rows are gone; forget their ORM identities so the isbns can be reused
        self.session.expunge_all()
        logger.info("Cleared all books and checkouts")

    def add(self, book: BookRecord) -> BookRecord:
        existing = safe_query(
            self.session,
            lambda s: s.get(BookDB, book.isbn, populate_existing=True),
            "Failed to check for existing book",
        )
        if existing is not None:
            raise DuplicateError(f"book {book.isbn} already exists", widget="isbn")

        row = BookDB(
            isbn=book.isbn,
            title=book.title,
            authors=list(book.authors),
            pages=book.pages,
            year=book.year,
            publisher=book.publisher,
            n_copies=book.n_copies,
            search_text=search_text(book.title, book.authors),
        )
        self.session.add(row)
        try:
            self._write("add book")
        except DuplicateError as e:
            raise DuplicateError(f"book {book.isbn} already exists", widget="isbn") from e
        return self._to_record(row)

    def get_by_isbn(self, isbn: str) -> BookRecord:
        query = select(BookDB).where(BookDB.isbn == isbn).execution_options(populate_existing=True)
        row = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get book by ISBN",
        )
        if row is None:
            raise NotFoundError(f"no book for isbn '{isbn}'", widget="isbn")
        return self._to_record(row)

    def search(self, query: SearchQuery) -> list[BookRecord]:
        stmt = select(BookDB)
        for term in query.terms:
            stmt = stmt.where(BookDB.search_text.like(_like_word(term), escape="\\"))

        stmt = (
            stmt.order_by(BookDB.title.asc(), BookDB.isbn.asc())
            .offset(query.index)
            .limit(query.count)
            .execution_options(populate_existing=True)
        )

        results = safe_query(
            self.session,
            lambda s: s.execute(stmt).scalars().all(),
            "Failed to search books",
        )
        return [self._to_record(row) for row in results]

    def get_checkout(self, patron_id: str, isbn: str) -> Lend | None:
        query = select(CheckoutDB).where(CheckoutDB.patron_id == patron_id, CheckoutDB.isbn == isbn)
        row = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get checkout",
        )
        return None if row is None else self._to_lend(row)

    def insert_checkout(self, lend: Lend) -> None:
        self.session.add(CheckoutDB(isbn=lend.isbn, patron_id=lend.patron_id))
        try:
            self._write("insert checkout")
        except DuplicateError as e:
            raise DuplicateError(
                f"patron {lend.patron_id} already has book {lend.isbn} checked out",
                widget="isbn",
            ) from e

    def delete_checkout(self, lend: Lend) -> bool:
        stmt = (
            delete(CheckoutDB)
            .where(CheckoutDB.patron_id == lend.patron_id, CheckoutDB.isbn == lend.isbn)
            .execution_options(synchronize_session="fetch")
        )
        result = safe_query(self.session, lambda s: s.execute(stmt), "Failed to delete checkout")
        self._write("delete checkout")
        return result.rowcount > 0

    def adjust_copy_count(self, isbn: str, delta: int) -> None:
        # Compare-and-swap: the row only changes if the new count is valid
        stmt = (
            update(BookDB)
            .where(BookDB.isbn == isbn, BookDB.n_copies + delta >= 0)
            .values(n_copies=BookDB.n_copies + delta)
            .execution_options(synchronize_session=False)
        )
        if delta > 0:
            stmt = stmt.where(BookDB.n_copies <= MAX_INTEGER - delta)
        result = safe_query(self.session, lambda s: s.execute(stmt), "Failed to adjust copy count")

        if result.rowcount == 0:
            exists = safe_query(
                self.session,
                lambda s: s.execute(
                    select(func.count()).select_from(BookDB).where(BookDB.isbn == isbn)
                ).scalar(),
                "Failed to check book existence",
            )
            if not exists:
                raise NotFoundError(f"no book for isbn '{isbn}'", widget="isbn")
            if delta > 0:
                raise too_many_copies(isbn)
            raise InsufficientCopiesError(f"not enough copies for book '{isbn}'", widget="isbn")

        self._write("adjust copy count")

    def get_checkouts_by_isbn(self, isbn: str) -> list[Lend]:
        query = select(CheckoutDB).where(CheckoutDB.isbn == isbn).order_by(CheckoutDB.patron_id)
        rows = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get checkouts for book",
        )
        return [self._to_lend(row) for row in rows]

    def _to_record(self, row: BookDB) -> BookRecord:
        """Convert book DB object to Pydantic model."""
        return BookRecord(
            isbn=row.isbn,
            title=row.title,
            authors=list(row.authors),
            pages=row.pages,
            year=row.year,
            publisher=row.publisher,
            n_copies=row.n_copies,
        )

    def _to_lend(self, row: CheckoutDB) -> Lend:
        """Convert checkout DB object to Pydantic model."""
        return Lend(isbn=row.isbn, patron_id=row.patron_id)
