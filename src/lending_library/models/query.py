"""
Catalog search models.

A ``FindRequest`` is what callers send; the engine turns it into a
``SearchQuery`` of normalized terms for the repository, which performs the
matching, sorting and slicing itself.

Matching is word based: a book matches when every search term appears as a
word of its title or authors, ignoring case.
"""

import re

from pydantic import BaseModel, ConfigDict, Field

from .fields import NonNegativeInteger, SearchText

DEFAULT_COUNT = 5

WORD_PATTERN = re.compile(r"\w+")


def search_words(text: str) -> list[str]:
    """Split text into lower-cased word tokens."""
    return WORD_PATTERN.findall(text.lower())


def search_terms(text: str) -> list[str]:
    """Return the distinct words of two or more characters, in order."""
    terms: list[str] = []
    for word in search_words(text):
        if len(word) > 1 and word not in terms:
            terms.append(word)
    return terms


def catalog_words(title: str, authors: list[str]) -> list[str]:
    """Words a book can be found by."""
    return search_words(" ".join([title, *authors]))


class FindRequest(BaseModel):
    """A request for a slice of the books matching some search text."""

    model_config = ConfigDict(strict=True)

    search: SearchText = Field(
        ...,
        description="Words that must all appear in the title or authors",
        examples=["animal farm", "orwell"],
    )

    index: NonNegativeInteger = Field(
        default=0,
        description="Offset of the first result in title order",
    )

    count: NonNegativeInteger = Field(
        default=DEFAULT_COUNT,
        description="Maximum number of results",
    )


class SearchQuery(BaseModel):
    """Normalized search handed to the repository."""

    terms: list[str] = Field(..., min_length=1)
    index: int = Field(default=0, ge=0)
    count: int = Field(default=DEFAULT_COUNT, ge=0)

    @classmethod
    def from_request(cls, request: FindRequest) -> "SearchQuery":
        return cls(terms=search_terms(request.search), index=request.index, count=request.count)

    def matches(self, words: set[str]) -> bool:
        """Check a book's words against every term."""
        return all(term in words for term in self.terms)
