"""Structlog processors for notification logs.

Notification payloads carry recipient content (template data, base64
attachments) that must not reach the log sink, and batch operations tend to
log long id lists.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data
"""

from typing import Any

# Keys whose values are never written to logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "credential",
        "template_data",
        "file_base64",
        "content",
    }
)

# Keys that hold our own pagination cursors, not secrets
_ALLOWED_KEYS = frozenset({"continuation_token", "has_continuation_token"})


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive values in log entries.

    Matching is a case-insensitive substring test on the key.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            is_sensitive = key_lower not in _ALLOWED_KEYS and any(
                pattern in key_lower for pattern in patterns
            )
            if is_sensitive and value is not None:
                masked_dict[key] = mask_value
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates long string and list values.

    Args:
        max_length: Maximum string length (and list length) before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
            elif isinstance(value, list) and len(value) > max_length:
                event_dict[key] = value[:max_length] + [
                    f"...[truncated, {len(value)} items total]"
                ]
        return event_dict

    return processor
