"""
Lending Library models.

Pydantic models for the catalog and circulation:
- Book / BookRecord: add requests and stored catalog entries
- Lend: checkout and return requests, and the checkout records they create
- FindRequest / SearchQuery: catalog search requests
"""

from .book import Book, BookRecord
from .lending import IsbnRequest, Lend
from .query import DEFAULT_COUNT, FindRequest, SearchQuery

__all__ = [
    "DEFAULT_COUNT",
    "Book",
    "BookRecord",
    "FindRequest",
    "IsbnRequest",
    "Lend",
    "SearchQuery",
]
