"""Factory for the notification stores, dispatch service and template repository."""

from typing import Optional

from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from modules.notifications.attachments import AttachmentRepository
from modules.notifications.blobs import BlobStore, InMemoryBlobStore, S3BlobStore
from modules.notifications.event_store import (
    DynamoDBEventStore,
    EventStore,
    InMemoryEventStore,
)
from modules.notifications.models import (
    EmailNotificationItem,
    MeetingNotificationItem,
    NotificationType,
)
from modules.notifications.queue import InMemoryQueue, NotificationQueue, SQSQueue
from modules.notifications.repository import NotificationHistoryRepository
from modules.notifications.service import NotificationDispatchService
from modules.notifications.stores import (
    DynamoDBTableStore,
    InMemoryTableStore,
    TableStore,
)
from modules.notifications.templates import MailTemplateRepository

logger = get_module_logger()

SUPPORTED_BACKENDS = ("memory", "aws")


def create_table_store(
    settings: Settings, notification_type: NotificationType, backend: str
) -> TableStore:
    storage = settings.storage
    table_name = (
        storage.meeting_history_table_name
        if notification_type == NotificationType.MEET
        else storage.email_history_table_name
    )
    if backend == "aws":
        return DynamoDBTableStore(table_name)
    return InMemoryTableStore(name=table_name)


def create_event_store(settings: Settings, backend: str) -> EventStore:
    if backend == "aws":
        return DynamoDBEventStore(
            settings.storage.events_table_name,
            settings.storage.events_external_id_index,
        )
    return InMemoryEventStore()


def create_blob_store(settings: Settings, backend: str) -> BlobStore:
    if backend == "aws":
        return S3BlobStore(settings.storage.blob_bucket_name)
    return InMemoryBlobStore()


def create_queue(settings: Settings, backend: str) -> NotificationQueue:
    if backend == "aws":
        if not settings.storage.notification_queue_url:
            raise ValueError("NOTIFICATION_QUEUE_URL is required for the aws backend")
        return SQSQueue(settings.storage.notification_queue_url)
    return InMemoryQueue()


def _resolve_backend(settings: Settings, backend: Optional[str]) -> str:
    backend = backend or settings.storage.backend
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: memory, aws"
        )
    return backend


def create_template_repository(
    settings: Settings, backend: Optional[str] = None
) -> MailTemplateRepository:
    """Build the mail template repository from settings.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = _resolve_backend(settings, backend)
    table_name = settings.storage.mail_template_table_name
    table: TableStore = (
        DynamoDBTableStore(table_name)
        if backend == "aws"
        else InMemoryTableStore(name=table_name)
    )
    logger.info("creating_template_repository", backend=backend, table=table_name)
    return MailTemplateRepository(table, create_blob_store(settings, backend))


def create_dispatch_service(
    settings: Settings, backend: Optional[str] = None
) -> NotificationDispatchService:
    """Build the dispatch service and its stores from settings.

    Args:
        settings: Application settings.
        backend: Optional override of ``settings.storage.backend``.

    Raises:
        ValueError: If the backend is unknown.

    Examples:
        >>> service = create_dispatch_service(get_settings())
        >>> service = create_dispatch_service(get_settings(), backend="memory")
    """
    backend = _resolve_backend(settings, backend)

    notifications = settings.notifications
    event_store = create_event_store(settings, backend)
    attachments = AttachmentRepository(create_blob_store(settings, backend))

    repositories = {
        notification_type: NotificationHistoryRepository(
            table=create_table_store(settings, notification_type, backend),
            event_store=event_store,
            attachments=attachments,
            item_cls=item_cls,
            batch_size=notifications.batch_size_to_store,
            default_page_size=notifications.default_page_size,
            legacy_updated_date_bounds=notifications.legacy_updated_date_bounds,
        )
        for notification_type, item_cls in (
            (NotificationType.MAIL, EmailNotificationItem),
            (NotificationType.MEET, MeetingNotificationItem),
        )
    }

    logger.info(
        "creating_dispatch_service",
        backend=backend,
        batch_size=notifications.batch_size_to_store,
    )
    return NotificationDispatchService(
        repositories=repositories,
        queue=create_queue(settings, backend),
        queue_message_chunk_size=notifications.queue_message_chunk_size,
    )
