"""Operation context binding for structured logging.

Binds batch-scoped metadata (correlation id, application, notification
type) so that every log entry emitted while a batch is created, updated or
reported carries it.

Usage:
    from infrastructure.logging import bind_operation_context

    with bind_operation_context(application="payroll", notification_type="Mail"):
        logger.info("creating_notifications", count=3)

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_operation_context(
    correlation_id: Optional[str] = None,
    application: Optional[str] = None,
    notification_type: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind operation-scoped context to all logs within the block.

    Args:
        correlation_id: Unique operation identifier. Auto-generated if not provided.
        application: Owning application of the batch, if known.
        notification_type: "Mail" or "Meet", if known.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id bound for the block.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    if application is not None:
        context["application"] = application

    if notification_type is not None:
        context["notification_type"] = notification_type

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_operation_context() -> None:
    """Clear all bound context, e.g. between queue messages in a worker."""
    structlog.contextvars.clear_contextvars()
