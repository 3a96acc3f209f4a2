"""
Request validation for the Lending Library.

Each operation has a fixed pydantic schema. ``validate`` checks a raw,
loosely-typed request against it and returns the typed model, or raises
``RequestValidationError`` listing what is wrong.

Errors are ranked MISSING > BAD_TYPE > BAD_REQ. When a request has
problems of several kinds only the highest ranked kind is reported, but
every error of that kind is included so a client can flag all the
offending inputs at once.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ErrorCode, FieldError, RequestValidationError
from .models import Book, FindRequest, IsbnRequest, Lend

SchemaType = TypeVar("SchemaType", bound=BaseModel)

VALIDATORS: dict[str, type[BaseModel]] = {
    "addBook": Book,
    "getBook": IsbnRequest,
    "findBooks": FindRequest,
    "checkoutBook": Lend,
    "returnBook": Lend,
    "findLendings": IsbnRequest,
}

PRIORITY = (ErrorCode.MISSING, ErrorCode.BAD_TYPE, ErrorCode.BAD_REQ)


def validate(operation: str, request: Any) -> Any:
    """
    Validate ``request`` against the schema for ``operation``.

    Args:
        operation: Operation name, e.g. "addBook" or "checkoutBook"
        request: Raw request, normally a dict decoded from JSON

    Returns:
        The validated pydantic model for the operation

    Raises:
        RequestValidationError: If the request does not satisfy the schema
        ValueError: If no schema exists for ``operation``
    """
    schema = VALIDATORS.get(operation)
    if schema is None:
        raise ValueError(f"no validator for operation {operation!r}")
    return validate_schema(schema, request)


def validate_schema(schema: type[SchemaType], request: Any) -> SchemaType:
    try:
        return schema.model_validate(request)
    except ValidationError as e:
        raise RequestValidationError.from_errors(field_errors(e)) from e


def field_errors(exc: ValidationError) -> list[FieldError]:
    """Convert pydantic errors to field errors of the highest-priority kind."""
    errors = [_to_field_error(error) for error in exc.errors()]
    top = min((error.code for error in errors), key=PRIORITY.index)

    # A number failing both int and float reports twice; keep one per field
    seen: set[str | None] = set()
    reported = []
    for error in errors:
        if error.code == top and error.widget not in seen:
            seen.add(error.widget)
            reported.append(error)
    return reported


def classify(error_type: str) -> ErrorCode:
    if error_type == "missing":
        return ErrorCode.MISSING
    # strict mode reports wrong primitive types as string_type, float_type,
    # list_type, model_type, ...
    if error_type.endswith("_type"):
        return ErrorCode.BAD_TYPE
    return ErrorCode.BAD_REQ


def _to_field_error(error: dict[str, Any]) -> FieldError:
    code = classify(error["type"])
    loc = error.get("loc") or ()
    widget = str(loc[0]) if loc else None
    subject = widget or "request"

    if code == ErrorCode.MISSING:
        message = f"missing {subject} field"
    elif code == ErrorCode.BAD_TYPE:
        message = f"bad type for {subject}: {error['msg']}"
    else:
        message = f"invalid {subject}: {error['msg']}"

    return FieldError(code=code, message=message, widget=widget)
