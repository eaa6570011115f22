"""Operation status enumeration.

Classifies the outcome of a storage or messaging call so callers can decide
between retrying, surfacing a domain error, or treating the call as done.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, throttling)
        PERMANENT_ERROR: Non-retryable error (validation, access denied)
        NOT_FOUND: Table, bucket, queue or item not found
        CONFLICT: A conditional write was rejected (item already exists)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
