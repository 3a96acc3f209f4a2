"""Shared plumbing for the library tool handlers."""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from ..config import get_config
from ..database.session import session_scope
from ..database.sql_repository import SqlLibraryRepository
from ..errors import LibraryError, RepositoryException
from ..library import LendingLibrary

logger = logging.getLogger(__name__)


@contextmanager
def open_library() -> Generator[LendingLibrary, None, None]:
    """Lending library over a fresh database session for one request."""
    with session_scope() as session:
        yield LendingLibrary(SqlLibraryRepository(session), get_config().default_search_count)


def format_success_response(message: str, data: Any) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "data": data}


def format_error_response(error: LibraryError) -> dict[str, Any]:
    """Format a library error as a tool error response."""
    payload = error.to_dict()
    return {
        "isError": True,
        **payload,
        "content": [{"type": "text", "text": f"{payload['code']}: {payload['message']}"}],
    }


def format_unexpected_error(operation: str, error: Exception) -> dict[str, Any]:
    """Format an unexpected failure as an opaque DB error."""
    return format_error_response(RepositoryException(f"{operation} failed: {error!s}"))


def log_operation(operation: str, **kwargs) -> None:
    """Log operation details for audit trail."""
    logger.info(
        "Operation: %s | Details: %s", operation, " | ".join(f"{k}={v}" for k, v in kwargs.items())
    )
