"""Circulation Tools - Lending and Returns

Modifies library state through checkout and return operations.

Tools:
- checkout_book: Lend a copy of a book to a patron
- return_book: Take back a copy a patron holds
- find_lendings: List the patrons currently holding a book
"""

import logging
from typing import Any

from ..errors import LibraryError
from ..models import IsbnRequest, Lend
from .common import (
    format_error_response,
    format_success_response,
    format_unexpected_error,
    log_operation,
    open_library,
)

logger = logging.getLogger(__name__)


async def checkout_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Process book checkout request.

    Client calls: tool.call("checkout_book", {"patronId": "...", "isbn": "..."})
    """
    try:
        with open_library() as library:
            library.checkout_book(arguments)
    except LibraryError as e:
        logger.info("Checkout failed: %s", e)
        log_operation(
            "checkout_book_failed",
            patron_id=arguments.get("patronId"),
            isbn=arguments.get("isbn"),
            error_code=e.code.value,
        )
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in checkout_book tool")
        return format_unexpected_error("Checkout", e)

    lend = Lend.model_validate(arguments)
    log_operation("checkout_book_success", patron_id=lend.patron_id, isbn=lend.isbn)
    message = f"Checked out book '{lend.isbn}' to patron '{lend.patron_id}'"
    return format_success_response(message, {"checkout": lend.to_json()})


async def return_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Process book return request."""
    try:
        with open_library() as library:
            library.return_book(arguments)
    except LibraryError as e:
        logger.info("Return failed: %s", e)
        log_operation(
            "return_book_failed",
            patron_id=arguments.get("patronId"),
            isbn=arguments.get("isbn"),
            error_code=e.code.value,
        )
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in return_book tool")
        return format_unexpected_error("Return", e)

    lend = Lend.model_validate(arguments)
    log_operation("return_book_success", patron_id=lend.patron_id, isbn=lend.isbn)
    message = f"Patron '{lend.patron_id}' returned book '{lend.isbn}'"
    return format_success_response(message, {"return": lend.to_json()})


async def find_lendings_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        with open_library() as library:
            lendings = library.find_lendings(arguments.get("isbn"))
    except LibraryError as e:
        logger.info("Find lendings failed: %s", e)
        return format_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in find_lendings tool")
        return format_unexpected_error("Find lendings", e)

    message = f"{len(lendings)} copies of '{arguments['isbn']}' checked out"
    return format_success_response(message, {"lendings": [lend.to_json() for lend in lendings]})


checkout_book = {
    "name": "checkout_book",
    "description": (
        "Check out one copy of a book to a patron. Fails if the book is unknown, has no "
        "copies left, or the patron already holds a copy of it."
    ),
    "inputSchema": Lend.model_json_schema(by_alias=True),
    "handler": checkout_book_handler,
}

return_book = {
    "name": "return_book",
    "description": (
        "Return a copy of a book checked out by a patron, making it available again."
    ),
    "inputSchema": Lend.model_json_schema(by_alias=True),
    "handler": return_book_handler,
}

find_lendings = {
    "name": "find_lendings",
    "description": "List the current checkouts of a book, ordered by patron id.",
    "inputSchema": IsbnRequest.model_json_schema(),
    "handler": find_lendings_handler,
}
