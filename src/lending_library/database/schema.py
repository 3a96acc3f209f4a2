"""
SQLAlchemy database schema for the Lending Library.

Two tables back the catalog:
- books: one row per isbn holding the bibliographic data and the copy count
- book_checkouts: one row per copy a patron currently holds

The copy count check constraint and the (isbn, patron_id) unique constraint
are what keep concurrent checkouts honest; the repository relies on the
database rejecting writes that would break them.
"""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

# Base class for all SQLAlchemy models
Base = declarative_base()


class Book(Base):
    """
    Books table - the library catalog.

    ``search_text`` holds the lower-cased words of the title and authors,
    space separated and padded with a space at both ends, so a word can be
    matched with ``LIKE '% word %'``.
    """

    __tablename__ = "books"

    # ISBN-10 in its hyphenated ddd-ddd-ddd-d form
    isbn = Column(String(13), primary_key=True)
    title = Column(String(500), nullable=False)
    authors = Column(JSON, nullable=False)
    pages = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    publisher = Column(String(500), nullable=False)
    n_copies = Column(Integer, nullable=False, default=1)
    search_text = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    # Relationships
    checkouts = relationship("BookCheckout", back_populates="book")

    __table_args__ = (
        # Search results are ordered by title, then isbn
        Index("idx_book_title_isbn", "title", "isbn"),
        CheckConstraint("n_copies >= 0", name="check_copies_non_negative"),
        CheckConstraint("pages > 0", name="check_pages_positive"),
        CheckConstraint("year >= 1448", name="check_year_after_gutenberg"),
    )


class BookCheckout(Base):
    """
    Checkout records table - one row per copy currently lent out.

    Rows are deleted when the copy comes back; there is no history.
    """

    __tablename__ = "book_checkouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    isbn = Column(String(13), ForeignKey("books.isbn"), nullable=False)
    patron_id = Column(String(200), nullable=False)
    checkout_date = Column(DateTime, nullable=False, default=func.now())

    book = relationship("Book", back_populates="checkouts")

    __table_args__ = (
        Index("idx_checkout_isbn", "isbn"),
        # A patron may hold at most one copy of a title
        UniqueConstraint("isbn", "patron_id", name="unique_patron_checkout"),
    )
