"""
Checkout models for the Lending Library.

A ``Lend`` is both the checkout/return request and the stored checkout
record: the fact that a patron currently holds one copy of a title.
The (isbn, patron_id) pair identifies it.
"""

from pydantic import BaseModel, ConfigDict, Field

from .fields import Isbn, NonEmptyStr


class Lend(BaseModel):
    """A patron holding (or asking to hold) one copy of a title."""

    model_config = ConfigDict(strict=True, populate_by_name=True, frozen=True)

    isbn: Isbn = Field(
        ...,
        description="ISBN of the book being checked out or returned",
        examples=["123-456-789-0"],
    )

    patron_id: NonEmptyStr = Field(
        ...,
        alias="patronId",
        description="Identifier of the patron",
        examples=["joe", "patron_0042"],
    )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class IsbnRequest(BaseModel):
    """A request naming a single book."""

    model_config = ConfigDict(strict=True)

    isbn: Isbn = Field(..., description="ISBN of the book")
