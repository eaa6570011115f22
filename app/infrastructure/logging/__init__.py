"""Structured logging infrastructure.

Centralized logging configuration and utilities for the notification
service using structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_operation_context(): Context manager for batch-scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_operation_context(): Clear all bound context

Formatters:
    - mask_sensitive_data(): Processor to redact message content
    - truncate_large_values(): Processor to limit string and list lengths

Example:
    from infrastructure.logging import get_module_logger, bind_operation_context

    logger = get_module_logger()

    with bind_operation_context(application="payroll"):
        logger.info("notifications_queued", count=12)
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_operation_context,
    get_correlation_id,
    clear_operation_context,
)

from infrastructure.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_operation_context",
    "get_correlation_id",
    "clear_operation_context",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
