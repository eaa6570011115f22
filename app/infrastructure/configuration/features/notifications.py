"""Notifications feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class NotificationsSettings(FeatureSettings):
    """Notification lifecycle and reporting configuration.

    Environment Variables:
        NOTIFICATIONS_BATCH_SIZE_TO_STORE: Records per table-store transaction (default: 4)
        NOTIFICATIONS_DEFAULT_PAGE_SIZE: Report page size when none is requested (default: 100)
        NOTIFICATIONS_QUEUE_MESSAGE_CHUNK_SIZE: Notification ids per queue message (default: 10)
        NOTIFICATIONS_LEGACY_UPDATED_DATE_BOUNDS: Use the historical inverted
            comparisons for the updated-date report bounds (default: False)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        chunk_size = settings.notifications.batch_size_to_store
        ```
    """

    batch_size_to_store: int = Field(
        default=4,
        alias="NOTIFICATIONS_BATCH_SIZE_TO_STORE",
        description="Number of records written per table-store transaction",
    )
    default_page_size: int = Field(
        default=100,
        alias="NOTIFICATIONS_DEFAULT_PAGE_SIZE",
        description="Report page size used when the request does not set one",
    )
    queue_message_chunk_size: int = Field(
        default=10,
        alias="NOTIFICATIONS_QUEUE_MESSAGE_CHUNK_SIZE",
        description="Maximum notification ids referenced by one queue message",
    )
    legacy_updated_date_bounds: bool = Field(
        default=False,
        alias="NOTIFICATIONS_LEGACY_UPDATED_DATE_BOUNDS",
        description="Reproduce the inverted updated-date comparisons of older reports",
    )
