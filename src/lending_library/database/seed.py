"""
Catalog seeding for the Lending Library.

Nothing here runs on import. Callers load a fixture file with
``load_books`` or build a fake catalog with ``generate_books``, then add
the result through the engine with ``seed_books`` so every book passes
the same validation as a client request.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from faker import Faker

from ..models import BookRecord

if TYPE_CHECKING:
    from ..library import LendingLibrary

logger = logging.getLogger(__name__)


def load_books(path: str | Path) -> list[dict[str, Any]]:
    """
    Read book requests from a JSON file.

    The file must hold a JSON array of objects in addBook request form.

    Raises:
        ValueError: If the file does not hold a JSON array
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        books = json.load(f)

    if not isinstance(books, list):
        raise ValueError(f"{path} must contain a JSON array of books")

    logger.info("Loaded %d books from %s", len(books), path)
    return books


def seed_books(library: "LendingLibrary", books: list[dict[str, Any]]) -> list[BookRecord]:
    """Add each book request through the engine, returning the stored records."""
    records = [library.add_book(book) for book in books]
    logger.info("Seeded %d books", len(records))
    return records


def generate_books(count: int, seed: int = 42) -> list[dict[str, Any]]:
    """
    Generate a reproducible fake catalog.

    Args:
        count: Number of distinct books to generate
        seed: Faker seed; the same seed always yields the same books

    Returns:
        addBook requests with unique isbns
    """
    fake = Faker()
    fake.seed_instance(seed)
    current_year = datetime.now().year

    books = []
    for _ in range(count):
        books.append(
            {
                "isbn": fake.unique.numerify("###-###-###-#"),
                "title": fake.catch_phrase(),
                "authors": [fake.name() for _ in range(fake.random_int(min=1, max=3))],
                "pages": fake.random_int(min=40, max=1200),
                "year": fake.random_int(min=1800, max=current_year),
                "publisher": fake.company(),
                "nCopies": fake.random_int(min=1, max=5),
            }
        )
    return books
