"""
Book models for the Lending Library.

``Book`` is the schema an add request must satisfy; ``BookRecord`` is what
the catalog stores and returns. They differ only in the copy count: a
request may omit it (meaning one copy) but must never send zero, while a
stored record drops to zero once every copy is checked out.

Only the copy count of a stored book ever changes. Re-adding an isbn must
repeat every other field exactly.
"""

from pydantic import BaseModel, ConfigDict, Field

from .fields import AuthorList, Isbn, NonEmptyStr, PositiveInteger, PublishYear

# Fields that must match when an existing isbn is added again, in the
# order they are compared.
IMMUTABLE_FIELDS = ("title", "authors", "pages", "year", "publisher")


class Book(BaseModel):
    """A request to add one or more copies of a book to the catalog."""

    model_config = ConfigDict(
        strict=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "isbn": "123-456-789-0",
                "title": "Animal Farm",
                "authors": ["George Orwell"],
                "pages": 112,
                "year": 1945,
                "publisher": "Secker and Warburg",
                "nCopies": 2,
            }
        },
    )

    isbn: Isbn = Field(
        ...,
        description="ISBN-10 in the hyphenated form ddd-ddd-ddd-d",
        examples=["123-456-789-0"],
    )

    title: NonEmptyStr = Field(..., description="Title of the book")

    authors: AuthorList = Field(..., description="Authors in credit order")

    pages: PositiveInteger = Field(..., description="Number of pages")

    year: PublishYear = Field(..., description="Year of publication")

    publisher: NonEmptyStr = Field(..., description="Publisher name")

    n_copies: PositiveInteger | None = Field(
        default=None,
        alias="nCopies",
        description="Number of copies being added (default 1)",
    )

    def to_record(self, n_copies: int) -> "BookRecord":
        """Build the stored form of this book with the given copy count."""
        return BookRecord(**self.model_dump(exclude={"n_copies"}), n_copies=n_copies)

    def inconsistent_field(self, record: "BookRecord") -> str | None:
        """Return the first immutable field that differs from ``record``, if any."""
        for field in IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(record, field):
                return field
        return None


class BookRecord(BaseModel):
    """A book as stored in the catalog."""

    model_config = ConfigDict(populate_by_name=True)

    isbn: str
    title: str
    authors: list[str]
    pages: int
    year: int
    publisher: str
    n_copies: int = Field(..., ge=0, alias="nCopies")

    @property
    def is_available(self) -> bool:
        """Check if at least one copy can be checked out."""
        return self.n_copies > 0

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
