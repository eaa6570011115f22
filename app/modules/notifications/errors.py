"""Notification domain errors."""

from typing import Optional

from infrastructure.operations import OperationResult


class NotificationError(Exception):
    """Base class for notification errors."""


class InvalidArgumentError(NotificationError, ValueError):
    """Raised when a required argument is missing or empty."""


class NotificationNotFoundError(InvalidArgumentError):
    """No record exists for the requested notification id."""

    def __init__(self, notification_id: str, message: Optional[str] = None):
        self.notification_id = notification_id
        super().__init__(message or f"No entity found for {notification_id}")


class DuplicateNotificationError(InvalidArgumentError):
    """More than one record exists for a notification id."""

    def __init__(self, notification_id: str, message: Optional[str] = None):
        self.notification_id = notification_id
        super().__init__(
            message or f"More than one entity found for {notification_id}"
        )


class StoreOperationError(NotificationError):
    """A backing store (table, event store, blob, queue) reported a failure.

    Attributes:
        result: The failing OperationResult, if one was returned.
    """

    def __init__(self, message: str, result: Optional[OperationResult] = None):
        self.result = result
        super().__init__(message)


class StoreTransactionError(StoreOperationError):
    """A table-store transaction was rejected.

    Attributes:
        chunk_index: Index of the rejected chunk within the batch, if known.
    """

    def __init__(
        self,
        message: str,
        result: Optional[OperationResult] = None,
        chunk_index: Optional[int] = None,
    ):
        self.chunk_index = chunk_index
        super().__init__(message, result=result)


class RecordDecodeError(NotificationError, ValueError):
    """A stored row could not be rebuilt into a notification record."""

    def __init__(self, message: str, row_key: Optional[str] = None):
        self.row_key = row_key
        super().__init__(message)


class InvalidStatusTransitionError(NotificationError):
    """A status change is not allowed by the delivery state machine."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move notification from {current.value} to {target.value}"
        )
