"""
Tests for the repository contract.

The ``repository`` fixture runs each test against the in-memory and the
SQL implementation, so both must behave identically.
"""

import pytest

from lending_library.database.repository import (
    DuplicateError,
    InsufficientCopiesError,
    NotFoundError,
    RepositoryException,
)
from lending_library.models import BookRecord, Lend, SearchQuery


def _record(isbn: str = "000-000-000-1", title: str = "Animal Farm", n_copies: int = 1, **kwargs):
    return BookRecord(
        isbn=isbn,
        title=title,
        authors=kwargs.get("authors", ["George Orwell"]),
        pages=kwargs.get("pages", 112),
        year=kwargs.get("year", 1945),
        publisher=kwargs.get("publisher", "Secker and Warburg"),
        n_copies=n_copies,
    )


def _lend(isbn: str = "000-000-000-1", patron_id: str = "joe") -> Lend:
    return Lend(isbn=isbn, patron_id=patron_id)


class TestBooks:
    def test_add_and_get(self, repository):
        added = repository.add(_record(n_copies=2))

        assert added == _record(n_copies=2)
        assert repository.get_by_isbn("000-000-000-1") == _record(n_copies=2)

    def test_duplicate_isbn(self, repository):
        repository.add(_record())

        with pytest.raises(DuplicateError):
            repository.add(_record(title="Other"))

        assert repository.get_by_isbn("000-000-000-1").title == "Animal Farm"

    def test_get_missing(self, repository):
        with pytest.raises(NotFoundError) as exc_info:
            repository.get_by_isbn("999-999-999-9")

        assert exc_info.value.widget == "isbn"

    def test_returned_records_are_copies(self, repository):
        repository.add(_record())
        book = repository.get_by_isbn("000-000-000-1")
        book.authors.append("Eric Blair")

        assert repository.get_by_isbn("000-000-000-1").authors == ["George Orwell"]


class TestCopyCount:
    def test_adjust(self, repository):
        repository.add(_record(n_copies=2))

        repository.adjust_copy_count("000-000-000-1", 3)
        assert repository.get_by_isbn("000-000-000-1").n_copies == 5

        repository.adjust_copy_count("000-000-000-1", -5)
        assert repository.get_by_isbn("000-000-000-1").n_copies == 0

    def test_never_negative(self, repository):
        repository.add(_record(n_copies=1))

        with pytest.raises(InsufficientCopiesError):
            repository.adjust_copy_count("000-000-000-1", -2)

        assert repository.get_by_isbn("000-000-000-1").n_copies == 1

    def test_missing_book(self, repository):
        with pytest.raises(NotFoundError):
            repository.adjust_copy_count("999-999-999-9", 1)

    def test_never_beyond_integer_range(self, repository):
        repository.add(_record(n_copies=2**63 - 2))

        repository.adjust_copy_count("000-000-000-1", 1)
        with pytest.raises(RepositoryException):
            repository.adjust_copy_count("000-000-000-1", 1)

        assert repository.get_by_isbn("000-000-000-1").n_copies == 2**63 - 1


class TestCheckouts:
    def test_insert_and_get(self, repository):
        repository.add(_record())
        repository.insert_checkout(_lend())

        assert repository.get_checkout("joe", "000-000-000-1") == _lend()
        assert repository.get_checkout("sue", "000-000-000-1") is None

    def test_duplicate_checkout(self, repository):
        repository.add(_record(n_copies=2))
        repository.insert_checkout(_lend())

        with pytest.raises(DuplicateError):
            repository.insert_checkout(_lend())

        assert repository.get_checkouts_by_isbn("000-000-000-1") == [_lend()]

    def test_delete(self, repository):
        repository.add(_record())
        repository.insert_checkout(_lend())

        assert repository.delete_checkout(_lend()) is True
        assert repository.delete_checkout(_lend()) is False
        assert repository.get_checkout("joe", "000-000-000-1") is None

    def test_reinsert_after_delete(self, repository):
        repository.add(_record())
        repository.insert_checkout(_lend())
        repository.get_checkout("joe", "000-000-000-1")
        repository.delete_checkout(_lend())

        repository.insert_checkout(_lend())

        assert repository.get_checkouts_by_isbn("000-000-000-1") == [_lend()]

    def test_by_isbn_ordered_by_patron(self, repository):
        repository.add(_record())
        repository.add(_record(isbn="000-000-000-2", title="Burmese Days"))
        for patron in ("zoe", "adam", "mia"):
            repository.insert_checkout(_lend(patron_id=patron))
        repository.insert_checkout(_lend(isbn="000-000-000-2", patron_id="bob"))

        assert [lend.patron_id for lend in repository.get_checkouts_by_isbn("000-000-000-1")] == [
            "adam",
            "mia",
            "zoe",
        ]
        assert repository.get_checkouts_by_isbn("000-000-000-3") == []


class TestSearch:
    @pytest.fixture
    def catalog(self, repository):
        repository.add(_record(isbn="000-000-000-3", title="Animal Farm"))
        repository.add(_record(isbn="000-000-000-1", title="Animal Farm"))
        repository.add(_record(isbn="000-000-000-2", title="Burmese Days"))
        repository.add(
            _record(isbn="000-000-000-4", title="Brave New World", authors=["Aldous Huxley"])
        )
        return repository

    def test_sorted_by_title_then_isbn(self, catalog):
        books = catalog.search(SearchQuery(terms=["orwell"]))

        assert [(b.title, b.isbn) for b in books] == [
            ("Animal Farm", "000-000-000-1"),
            ("Animal Farm", "000-000-000-3"),
            ("Burmese Days", "000-000-000-2"),
        ]

    def test_all_terms_required(self, catalog):
        books = catalog.search(SearchQuery(terms=["days", "orwell"]))
        assert [b.title for b in books] == ["Burmese Days"]

    def test_slice(self, catalog):
        books = catalog.search(SearchQuery(terms=["orwell"], index=1, count=1))
        assert [b.isbn for b in books] == ["000-000-000-3"]

        assert catalog.search(SearchQuery(terms=["orwell"], index=3)) == []

    def test_terms_are_whole_words(self, catalog):
        assert catalog.search(SearchQuery(terms=["orwel"])) == []
        assert catalog.search(SearchQuery(terms=["farms"])) == []

    def test_underscore_is_not_a_wildcard(self, repository):
        repository.add(_record(isbn="000-000-000-1", title="snake_case Patterns"))
        repository.add(_record(isbn="000-000-000-2", title="snakeXcase Patterns"))

        books = repository.search(SearchQuery(terms=["snake_case"]))

        assert [b.isbn for b in books] == ["000-000-000-1"]


class TestTransactions:
    def test_commit(self, repository):
        repository.add(_record())

        with repository.transaction():
            repository.insert_checkout(_lend())
            repository.adjust_copy_count("000-000-000-1", -1)

        assert repository.get_by_isbn("000-000-000-1").n_copies == 0
        assert repository.get_checkout("joe", "000-000-000-1") == _lend()

    def test_rollback_on_error(self, repository):
        repository.add(_record())

        with pytest.raises(InsufficientCopiesError), repository.transaction():
            repository.insert_checkout(_lend())
            repository.adjust_copy_count("000-000-000-1", -2)

        assert repository.get_by_isbn("000-000-000-1").n_copies == 1
        assert repository.get_checkout("joe", "000-000-000-1") is None

    def test_nested_blocks_join_the_outer_one(self, repository):
        repository.add(_record(n_copies=2))

        with pytest.raises(RuntimeError), repository.transaction():
            with repository.transaction():
                repository.adjust_copy_count("000-000-000-1", 1)
            raise RuntimeError("abort")

        assert repository.get_by_isbn("000-000-000-1").n_copies == 2


def test_clear(repository):
    repository.add(_record())
    repository.insert_checkout(_lend())

    repository.clear()

    with pytest.raises(NotFoundError):
        repository.get_by_isbn("000-000-000-1")
    assert repository.get_checkouts_by_isbn("000-000-000-1") == []

    repository.add(_record(title="Animal Farm Again"))
    assert repository.get_by_isbn("000-000-000-1").title == "Animal Farm Again"
