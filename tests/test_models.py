"""Tests for the catalog and circulation models."""

import pytest
from pydantic import ValidationError

from lending_library.models import Book, BookRecord, FindRequest, Lend, SearchQuery
from lending_library.models.query import catalog_words, search_terms, search_words


@pytest.fixture
def animal_farm() -> Book:
    return Book(
        isbn="000-000-000-1",
        title="Animal Farm",
        authors=["George Orwell"],
        pages=112,
        year=1945,
        publisher="Secker and Warburg",
    )


class TestBook:
    def test_to_record(self, animal_farm):
        record = animal_farm.to_record(3)

        assert record == BookRecord(
            isbn="000-000-000-1",
            title="Animal Farm",
            authors=["George Orwell"],
            pages=112,
            year=1945,
            publisher="Secker and Warburg",
            n_copies=3,
        )

    def test_consistent_record(self, animal_farm):
        assert animal_farm.inconsistent_field(animal_farm.to_record(1)) is None

    def test_first_inconsistent_field_wins(self, animal_farm):
        record = animal_farm.to_record(1).model_copy(update={"title": "Animal Farm II", "pages": 1})

        assert animal_farm.inconsistent_field(record) == "title"

    def test_authors_compared_by_length_and_order(self, animal_farm):
        longer = animal_farm.to_record(1).model_copy(
            update={"authors": ["George Orwell", "Eric Blair"]}
        )
        assert animal_farm.inconsistent_field(longer) == "authors"

        two_authors = animal_farm.model_copy(update={"authors": ["A", "B"]})
        swapped = two_authors.to_record(1).model_copy(update={"authors": ["B", "A"]})
        assert two_authors.inconsistent_field(swapped) == "authors"

    def test_copy_count_is_ignored_for_consistency(self, animal_farm):
        assert animal_farm.inconsistent_field(animal_farm.to_record(9)) is None

    def test_copy_count_alias(self):
        book = Book.model_validate(
            {
                "isbn": "000-000-000-1",
                "title": "T",
                "authors": ["A"],
                "pages": 1,
                "year": 2000,
                "publisher": "P",
                "nCopies": 4,
            }
        )
        assert book.n_copies == 4


class TestBookRecord:
    def test_to_json_uses_wire_names(self, animal_farm):
        data = animal_farm.to_record(2).to_json()

        assert data["nCopies"] == 2
        assert "n_copies" not in data
        assert data["authors"] == ["George Orwell"]

    def test_availability(self, animal_farm):
        assert animal_farm.to_record(1).is_available
        assert not animal_farm.to_record(0).is_available

    def test_copy_count_cannot_be_negative(self, animal_farm):
        with pytest.raises(ValidationError):
            animal_farm.to_record(-1)


class TestLend:
    def test_wire_names(self):
        lend = Lend.model_validate({"isbn": "000-000-000-1", "patronId": "joe"})

        assert lend.patron_id == "joe"
        assert lend.to_json() == {"isbn": "000-000-000-1", "patronId": "joe"}

    def test_is_hashable(self):
        lend = Lend(isbn="000-000-000-1", patron_id="joe")
        assert {lend, Lend(isbn="000-000-000-1", patron_id="joe")} == {lend}


class TestSearch:
    def test_search_words_lowercase(self):
        assert search_words("Animal Farm: A Fairy-Story") == ["animal", "farm", "a", "fairy", "story"]

    def test_search_terms_drop_short_and_repeated_words(self):
        assert search_terms("a Farm, FARM and x animals") == ["farm", "and", "animals"]

    def test_catalog_words_include_authors(self):
        assert catalog_words("Animal Farm", ["George Orwell"]) == [
            "animal",
            "farm",
            "george",
            "orwell",
        ]

    def test_query_from_request(self):
        request = FindRequest(search="Orwell farm", index=2, count=3)
        query = SearchQuery.from_request(request)

        assert query.terms == ["orwell", "farm"]
        assert query.index == 2
        assert query.count == 3

    def test_matches_requires_every_term(self):
        query = SearchQuery(terms=["animal", "orwell"])

        assert query.matches({"animal", "farm", "george", "orwell"})
        assert not query.matches({"animal", "farm"})

    def test_query_needs_a_term(self):
        with pytest.raises(ValidationError):
            SearchQuery(terms=[])
