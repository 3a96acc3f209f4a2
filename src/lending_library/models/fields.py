"""
Constrained field types shared by the request schemas.

Request schemas run in pydantic strict mode, so a value of the wrong
primitive type fails with a ``*_type`` error before any of the checks
below run. The checks raise ``bad_request`` errors, which the validator
reports as BAD_REQ.

Numbers are declared as ``int | float`` so that ``2.5`` reaches the
integrality check (a constraint violation) instead of failing as a type
error. Integers pass through unchanged; whole floats are converted. Values
are capped at the largest signed 64-bit integer, the range SQLite stores.
"""

import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

GUTENBERG_YEAR = 1448
MAX_INTEGER = 2**63 - 1

ISBN_PATTERN = re.compile(r"[0-9]{3}-[0-9]{3}-[0-9]{3}-[0-9]")
SEARCH_WORD_PATTERN = re.compile(r"\w{2,}")

MESSAGES = {
    "isbn": 'must be of the form "ddd-ddd-ddd-d"',
    "non_empty": "must be non-empty",
    "authors": "must have one or more authors",
    "positive": "must be a positive integer",
    "non_negative": "must be a non-negative integer",
    "too_large": f"must be at most {MAX_INTEGER}",
    "search": "must contain at least one word of two or more characters",
}


def _bad_request(message: str) -> PydanticCustomError:
    return PydanticCustomError("bad_request", message)


def check_isbn(value: str) -> str:
    if not ISBN_PATTERN.fullmatch(value):
        raise _bad_request(MESSAGES["isbn"])
    return value


def check_non_empty(value: str) -> str:
    if not value:
        raise _bad_request(MESSAGES["non_empty"])
    return value


def check_authors(value: list[str]) -> list[str]:
    if not value:
        raise _bad_request(MESSAGES["authors"])
    return value


def _whole_number(value: int | float, message: str) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise _bad_request(message)
        value = int(value)
    if value > MAX_INTEGER:
        raise _bad_request(MESSAGES["too_large"])
    return value


def check_positive_integer(value: int | float) -> int:
    value = _whole_number(value, MESSAGES["positive"])
    if value <= 0:
        raise _bad_request(MESSAGES["positive"])
    return value


def check_non_negative_integer(value: int | float) -> int:
    value = _whole_number(value, MESSAGES["non_negative"])
    if value < 0:
        raise _bad_request(MESSAGES["non_negative"])
    return value


def check_publish_year(value: int | float) -> int:
    """Accept whole years from the Gutenberg press up to the current year."""
    message = f"must be a past year on or after {GUTENBERG_YEAR}"
    value = _whole_number(value, message)
    if not GUTENBERG_YEAR <= value <= datetime.now().year:
        raise _bad_request(message)
    return value


def check_search_text(value: str) -> str:
    if not SEARCH_WORD_PATTERN.search(value):
        raise _bad_request(MESSAGES["search"])
    return value


Isbn = Annotated[str, AfterValidator(check_isbn)]
NonEmptyStr = Annotated[str, AfterValidator(check_non_empty)]
AuthorList = Annotated[list[NonEmptyStr], AfterValidator(check_authors)]
PositiveInteger = Annotated[int | float, AfterValidator(check_positive_integer)]
NonNegativeInteger = Annotated[int | float, AfterValidator(check_non_negative_integer)]
PublishYear = Annotated[int | float, AfterValidator(check_publish_year)]
SearchText = Annotated[str, AfterValidator(check_search_text)]
