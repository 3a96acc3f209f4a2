"""
Error model for the Lending Library.

Every failure surfaced to callers is a ``LibraryError`` carrying one or more
``FieldError`` entries. Each entry has a code, a human-readable message and,
where one input is responsible, the name of that input (the ``widget``)
so a client can highlight it.

Codes:
- MISSING: a required field is absent
- BAD_TYPE: a field has the wrong primitive type
- BAD_REQ: a field violates a constraint, or a business rule was broken
- NOT_FOUND: the requested book does not exist
- DB: opaque persistence failure
"""

import enum

from pydantic import BaseModel, Field


class ErrorCode(str, enum.Enum):
    """Error kinds, listed from highest to lowest validation priority."""

    MISSING = "MISSING"
    BAD_TYPE = "BAD_TYPE"
    BAD_REQ = "BAD_REQ"
    NOT_FOUND = "NOT_FOUND"
    DB = "DB"


class FieldError(BaseModel):
    """A single error, optionally tied to the request field responsible."""

    code: ErrorCode
    message: str
    widget: str | None = Field(
        default=None,
        description="Name of the request field responsible for the error",
    )


class LibraryError(Exception):
    """Base exception for all lending library failures."""

    default_code: ErrorCode = ErrorCode.BAD_REQ

    def __init__(self, message: str, *, widget: str | None = None, errors: list[FieldError] | None = None):
        super().__init__(message)
        self.errors = errors or [FieldError(code=self.default_code, message=message, widget=widget)]

    @property
    def code(self) -> ErrorCode:
        """Code of the first (highest priority) error."""
        return self.errors[0].code

    @property
    def widget(self) -> str | None:
        return self.errors[0].widget

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": str(self),
            "errors": [error.model_dump(mode="json") for error in self.errors],
        }


class RequestValidationError(LibraryError):
    """Raised when a request does not match its operation schema."""

    @classmethod
    def from_errors(cls, errors: list[FieldError]) -> "RequestValidationError":
        message = "; ".join(error.message for error in errors)
        return cls(message, errors=errors)


class BusinessRuleError(LibraryError):
    """Raised when a well-formed request breaks a lending rule."""

    default_code = ErrorCode.BAD_REQ


class NotFoundError(LibraryError):
    """Raised when a book is not in the catalog."""

    default_code = ErrorCode.NOT_FOUND


class RepositoryException(LibraryError):
    """Raised on persistence failures."""

    default_code = ErrorCode.DB


class DuplicateError(RepositoryException):
    """Raised when a write violates a uniqueness constraint."""


class InsufficientCopiesError(RepositoryException):
    """Raised when a copy count adjustment would go below zero."""


__all__ = [
    "BusinessRuleError",
    "DuplicateError",
    "ErrorCode",
    "FieldError",
    "InsufficientCopiesError",
    "LibraryError",
    "NotFoundError",
    "RepositoryException",
    "RequestValidationError",
]
