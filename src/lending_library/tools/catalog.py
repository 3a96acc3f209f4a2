"""Catalog Tools - Adding and Finding Books

Tools:
- add_book: Add copies of a book to the catalog
- get_book: Fetch a single book by isbn
- find_books: Word search over titles and authors
- clear_catalog: Remove every book and checkout
"""

import logging
from typing import Any

from ..errors import LibraryError
from ..models import Book, FindRequest, IsbnRequest
from .common import (
    format_error_response,
    format_success_response,
    format_unexpected_error,
    log_operation,
    open_library,
)

logger = logging.getLogger(__name__)


async def add_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Add one or more copies of a book.

    Client calls: tool.call("add_book", {"isbn": "...", "title": "...", ...})
    """
    try:
        with open_library() as library:
            book = library.add_book(arguments)
    except LibraryError as e:
        logger.info("Add book failed: %s", e)
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in add_book tool")
        return format_unexpected_error("Add book", e)

    log_operation("add_book_success", isbn=book.isbn, n_copies=book.n_copies)
    message = f"Book '{book.title}' ({book.isbn}) now has {book.n_copies} copies"
    return format_success_response(message, {"book": book.to_json()})


async def get_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Fetch one book by isbn."""
    try:
        with open_library() as library:
            book = library.get_book(arguments.get("isbn"))
    except LibraryError as e:
        logger.info("Get book failed: %s", e)
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in get_book tool")
        return format_unexpected_error("Get book", e)

    return format_success_response(f"Found '{book.title}' ({book.isbn})", {"book": book.to_json()})


async def find_books_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Search the catalog.

    Every word of two or more characters in ``search`` must appear in the
    title or authors. Optional ``index`` and ``count`` select a slice of
    the title-ordered results.
    """
    try:
        with open_library() as library:
            books = library.find_books(arguments)
    except LibraryError as e:
        logger.info("Find books failed: %s", e)
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in find_books tool")
        return format_unexpected_error("Find books", e)

    if books:
        message = f"Found {len(books)} books: " + ", ".join(f"'{b.title}'" for b in books)
    else:
        message = "No books found"
    return format_success_response(message, {"books": [b.to_json() for b in books]})


async def clear_catalog_handler(arguments: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG001
    """Remove every book and checkout."""
    try:
        with open_library() as library:
            library.clear()
    except LibraryError as e:
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in clear_catalog tool")
        return format_unexpected_error("Clear catalog", e)

    log_operation("clear_catalog_success")
    return format_success_response("Catalog cleared", {})


add_book = {
    "name": "add_book",
    "description": (
        "Add copies of a book to the catalog. A new isbn creates the book; a known isbn "
        "adds nCopies (default 1) to its copy count, provided title, authors, pages, "
        "year and publisher match the stored book exactly."
    ),
    "inputSchema": Book.model_json_schema(by_alias=True),
    "handler": add_book_handler,
}

get_book = {
    "name": "get_book",
    "description": "Fetch a book and its current copy count by isbn.",
    "inputSchema": IsbnRequest.model_json_schema(),
    "handler": get_book_handler,
}

find_books = {
    "name": "find_books",
    "description": (
        "Find books whose title and authors contain every word of the search text. "
        "Results are sorted by title; index and count select a slice of them."
    ),
    "inputSchema": FindRequest.model_json_schema(),
    "handler": find_books_handler,
}

clear_catalog = {
    "name": "clear_catalog",
    "description": "Remove every book and checkout from the library.",
    "inputSchema": {"type": "object", "properties": {}},
    "handler": clear_catalog_handler,
}
