import sys
from pathlib import Path

# Make the application packages (infrastructure, integrations, modules)
# importable regardless of where pytest is invoked from.
APP_ROOT = Path(__file__).resolve().parents[1]
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

import pytest  # noqa: E402

from modules.notifications.attachments import AttachmentRepository  # noqa: E402
from modules.notifications.blobs import InMemoryBlobStore  # noqa: E402
from modules.notifications.event_store import InMemoryEventStore  # noqa: E402
from modules.notifications.models import (  # noqa: E402
    EmailNotificationItem,
    MeetingNotificationItem,
    NotificationType,
)
from modules.notifications.queue import InMemoryQueue  # noqa: E402
from modules.notifications.repository import (  # noqa: E402
    NotificationHistoryRepository,
)
from modules.notifications.service import NotificationDispatchService  # noqa: E402
from modules.notifications.stores import InMemoryTableStore  # noqa: E402


@pytest.fixture
def table_store():
    return InMemoryTableStore(name="email-history")


@pytest.fixture
def meeting_table_store():
    return InMemoryTableStore(name="meeting-history")


@pytest.fixture
def event_store():
    return InMemoryEventStore()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def notification_queue():
    return InMemoryQueue()


@pytest.fixture
def attachment_repository(blob_store):
    return AttachmentRepository(blob_store)


@pytest.fixture
def email_repository(table_store, event_store, attachment_repository):
    """Email history repository over in-memory stores, 4 rows per transaction."""
    return NotificationHistoryRepository(
        table=table_store,
        event_store=event_store,
        attachments=attachment_repository,
        item_cls=EmailNotificationItem,
        batch_size=4,
    )


@pytest.fixture
def meeting_repository(meeting_table_store, event_store, attachment_repository):
    return NotificationHistoryRepository(
        table=meeting_table_store,
        event_store=event_store,
        attachments=attachment_repository,
        item_cls=MeetingNotificationItem,
        batch_size=4,
    )


@pytest.fixture
def dispatch_service(email_repository, meeting_repository, notification_queue):
    return NotificationDispatchService(
        repositories={
            NotificationType.MAIL: email_repository,
            NotificationType.MEET: meeting_repository,
        },
        queue=notification_queue,
        queue_message_chunk_size=10,
    )
