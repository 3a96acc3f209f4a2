"""
Tools for the Lending Library server.

Each tool is a dictionary with a name, a description, a JSON input schema
and an async handler. Handlers take the raw request arguments and return
either ``{"content": [...], "data": ...}`` or, on failure,
``{"isError": True, "errors": [...], "content": [...]}``.
"""

from .catalog import add_book, clear_catalog, find_books, get_book
from .circulation import checkout_book, find_lendings, return_book

# Export all tools for server registration
all_tools = [
    add_book,
    get_book,
    find_books,
    clear_catalog,
    checkout_book,
    return_book,
    find_lendings,
]

__all__ = [
    "add_book",
    "all_tools",
    "checkout_book",
    "clear_catalog",
    "find_books",
    "find_lendings",
    "get_book",
    "return_book",
]
