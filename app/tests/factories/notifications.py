"""Test factories for notification records, events and report requests."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from modules.notifications.models import (
    EmailNotificationItem,
    EventNotification,
    MeetingNotificationItem,
    NotificationAttachment,
    NotificationReportRequest,
    NotificationStatus,
    NotificationStatusDto,
    NotificationType,
)

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_email_notification(
    notification_id: str = "n-1",
    application: str = "Contoso",
    status: NotificationStatus = NotificationStatus.QUEUED,
    send_on_utc_date: Optional[datetime] = BASE_TIME,
    **overrides,
) -> EmailNotificationItem:
    """Create an EmailNotificationItem with sensible defaults.

    Example:
        >>> item = make_email_notification("n-7", status=NotificationStatus.SENT)
    """
    fields = {
        "notification_id": notification_id,
        "application": application,
        "status": status,
        "send_on_utc_date": send_on_utc_date,
        "subject": f"Subject {notification_id}",
        "to": ["user@example.com"],
        "from_address": "noreply@example.com",
        "tracking_id": f"track-{notification_id}",
    }
    fields.update(overrides)
    return EmailNotificationItem(**fields)


def make_email_notifications(
    n: int = 3,
    application: str = "Contoso",
    prefix: str = "n",
    status: NotificationStatus = NotificationStatus.QUEUED,
    start: datetime = BASE_TIME,
    step: timedelta = timedelta(minutes=1),
) -> List[EmailNotificationItem]:
    return [
        make_email_notification(
            notification_id=f"{prefix}-{i:03d}",
            application=application,
            status=status,
            send_on_utc_date=start + step * i,
        )
        for i in range(n)
    ]


def make_email_with_content(notification_id: str = "n-1", **overrides):
    return make_email_notification(
        notification_id,
        body="<p>Hello</p>",
        template_data='{"name": "Ada"}',
        attachments=[
            NotificationAttachment(file_name="report.txt", file_base64="aGVsbG8=")
        ],
        **overrides,
    )


def make_meeting_notification(
    notification_id: str = "m-1",
    application: str = "Contoso",
    **overrides,
) -> MeetingNotificationItem:
    fields = {
        "notification_id": notification_id,
        "application": application,
        "subject": "Planning",
        "to": ["attendee@example.com"],
        "start": BASE_TIME + timedelta(days=1),
        "end": BASE_TIME + timedelta(days=1, hours=1),
        "location": "Room 1",
        "send_on_utc_date": BASE_TIME,
    }
    fields.update(overrides)
    return MeetingNotificationItem(**fields)


def make_event_notification(
    external_id: str = "n-1",
    application: str = "Contoso",
    status: NotificationStatus = NotificationStatus.QUEUED,
    **overrides,
) -> EventNotification:
    fields = {
        "id": f"event-{external_id}",
        "external_id": external_id,
        "notification_type": NotificationType.MAIL,
        "application": application,
        "subject": f"Subject {external_id}",
        "status": NotificationStatusDto(
            code=status.code,
            name=status.value,
            description=f"This notification {status.value}",
            last_modified_on=BASE_TIME,
        ),
    }
    fields.update(overrides)
    return EventNotification(**fields)


def make_report_request(**overrides) -> NotificationReportRequest:
    return NotificationReportRequest(**overrides)
