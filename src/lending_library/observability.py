"""Logfire observability for the Lending Library."""

import functools
import logging
import os
from collections.abc import Callable
from datetime import datetime

import logfire
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ObservabilityConfig(BaseModel):
    """Configuration for Logfire observability."""

    # Connection
    token: str = Field(default_factory=lambda: os.getenv("LOGFIRE_TOKEN", ""))
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    # Behavior
    enabled: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_ENABLED", "true").lower() == "true"
    )
    console_output: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_CONSOLE", "false").lower() == "true"
    )
    send_to_logfire: bool = Field(
        default_factory=lambda: os.getenv("LOGFIRE_SEND", "false").lower() == "true"
    )


# Library Business Metrics
books_circulation = logfire.metric_counter(
    "library.books.circulation", description="Book circulation events (checkout/return)"
)

catalog_additions = logfire.metric_counter(
    "library.catalog.copies_added", description="Copies added to the catalog"
)


def initialize_observability(config: ObservabilityConfig | None = None) -> ObservabilityConfig:
    """Initialize Logfire with configuration."""
    config = config or ObservabilityConfig()

    if not config.enabled:
        logger.debug("Observability disabled via configuration")
        return config

    logfire.configure(
        token=config.token or None,
        environment=config.environment,
        send_to_logfire=config.send_to_logfire,
        console=None if config.console_output else False,
    )
    logger.info("Logfire configured for environment %s", config.environment)
    return config


def record_circulation_event(event_type: str, isbn: str) -> None:
    """Record a checkout or return."""
    books_circulation.add(1, {"event_type": event_type, "isbn": isbn})


def record_copies_added(isbn: str, n_copies: int) -> None:
    catalog_additions.add(n_copies, {"isbn": isbn})


def trace_operation(operation: str):
    """Decorator to trace a lending engine operation."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with logfire.span(f"library.{operation}", operation=operation) as span:
                start_time = datetime.now()
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("operation.success", False)
                    span.set_attribute("operation.error", str(e))
                    raise

                span.set_attribute("operation.success", True)
                span.set_attribute(
                    "operation.duration_ms", (datetime.now() - start_time).total_seconds() * 1000
                )
                if isinstance(result, list):
                    span.set_attribute("result.item_count", len(result))
                return result

        return wrapper

    return decorator
