"""Notification domain models.

Records persisted in the history tables, the event-store mirror document and
the request/response shapes used by the dispatch service.

Status, priority and sensitivity are stored by label; ``NotificationStatus``
also carries the numeric code used by report filters and the event store.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Kind of notification, one history table per kind."""

    MAIL = "Mail"
    MEET = "Meet"


class NotificationStatus(str, Enum):
    """Delivery status of a notification.

    Codes: 0 Queued, 1 Processing, 2 Retrying, 3 Failed, 4 Sent, 5 FakeMail.
    """

    QUEUED = "Queued"
    PROCESSING = "Processing"
    RETRYING = "Retrying"
    FAILED = "Failed"
    SENT = "Sent"
    FAKE_MAIL = "FakeMail"

    @property
    def code(self) -> int:
        return _STATUS_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> "NotificationStatus":
        for status, status_code in _STATUS_CODES.items():
            if status_code == code:
                return status
        raise ValueError(f"Unknown notification status code: {code}")


_STATUS_CODES = {
    NotificationStatus.QUEUED: 0,
    NotificationStatus.PROCESSING: 1,
    NotificationStatus.RETRYING: 2,
    NotificationStatus.FAILED: 3,
    NotificationStatus.SENT: 4,
    NotificationStatus.FAKE_MAIL: 5,
}


class NotificationPriority(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


class MailSensitivity(str, Enum):
    NORMAL = "Normal"
    PERSONAL = "Personal"
    PRIVATE = "Private"
    CONFIDENTIAL = "Confidential"


class NotificationAttachment(BaseModel):
    """File attached to an email or meeting invite."""

    file_name: str
    file_base64: str
    is_inline: bool = False


class NotificationItem(BaseModel):
    """A notification as recorded in a history table.

    ``partition_key`` and ``row_key`` are derived from ``application`` and
    ``notification_id``. ``etag`` and ``timestamp`` are assigned by the table
    store on every write.
    """

    notification_id: str = ""
    application: str = ""
    notification_type: NotificationType = NotificationType.MAIL
    tracking_id: Optional[str] = None

    # Content
    subject: Optional[str] = None
    body: Optional[str] = None
    to: List[str] = Field(default_factory=list)
    cc: List[str] = Field(default_factory=list)
    bcc: List[str] = Field(default_factory=list)
    from_address: Optional[str] = None
    reply_to: Optional[str] = None
    template_id: Optional[str] = None
    template_data: Optional[str] = None
    attachments: List[NotificationAttachment] = Field(default_factory=list)
    blob_locator: Optional[str] = None

    # Delivery bookkeeping
    status: NotificationStatus = NotificationStatus.QUEUED
    try_count: int = 0
    error_message: Optional[str] = None
    send_on_utc_date: Optional[datetime] = None
    email_account_used: Optional[str] = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    sensitivity: MailSensitivity = MailSensitivity.NORMAL

    # Storage coordinates
    etag: Optional[str] = None
    timestamp: Optional[datetime] = None
    created_date_time: Optional[datetime] = None
    updated_date_time: Optional[datetime] = None

    @property
    def partition_key(self) -> str:
        return self.application

    @property
    def row_key(self) -> str:
        return self.notification_id


class EmailNotificationItem(NotificationItem):
    notification_type: NotificationType = NotificationType.MAIL


class RecurrencePattern(BaseModel):
    type: str = "daily"
    interval: int = 1
    day_of_month: Optional[int] = None
    days_of_week: List[str] = Field(default_factory=list)
    month: Optional[int] = None
    first_day_of_week: Optional[str] = None
    index: Optional[str] = None


class RecurrenceRange(BaseModel):
    type: str = "endDate"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    number_of_occurrences: Optional[int] = None


class MeetingRecurrence(BaseModel):
    pattern: RecurrencePattern
    range: RecurrenceRange


class MeetingNotificationItem(NotificationItem):
    """A meeting invite recorded in the meeting history table."""

    notification_type: NotificationType = NotificationType.MEET

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    is_all_day: bool = False
    location: Optional[str] = None
    is_online_meeting: bool = False
    is_response_requested: bool = True
    reminder_minutes_before_start: Optional[int] = None
    show_as: Optional[str] = None
    ical_uid: Optional[str] = None
    is_cancel: bool = False
    allow_new_time_proposals: bool = True
    recurrence: Optional[MeetingRecurrence] = None


class NotificationStatusDto(BaseModel):
    """Status block of an event-store document."""

    code: int
    name: str
    description: str
    last_modified_on: datetime


class EventNotification(BaseModel):
    """Event-store mirror of a notification, keyed by ``external_id``."""

    id: str
    external_id: str
    notification_type: NotificationType
    application: str
    subject: Optional[str] = None
    sender_address: Optional[str] = None
    receiver_addresses: List[str] = Field(default_factory=list)
    priority: NotificationPriority = NotificationPriority.NORMAL
    sensitivity: MailSensitivity = MailSensitivity.NORMAL
    retry_count: int = 0
    failure: Optional[str] = None
    published_on: Optional[datetime] = None
    status: NotificationStatusDto


class DateTimeRange(BaseModel):
    """Half-open ``[start_date, end_date)`` window over ``send_on_utc_date``."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class NotificationReportRequest(BaseModel):
    """Sparse report query; empty lists and unset dates impose no constraint."""

    application_filter: List[str] = Field(default_factory=list)
    accounts_used_filter: List[str] = Field(default_factory=list)
    notification_ids_filter: List[str] = Field(default_factory=list)
    tracking_ids_filter: List[str] = Field(default_factory=list)
    notification_status_filter: List[int] = Field(default_factory=list)
    created_date_time_start: Optional[str] = None
    created_date_time_end: Optional[str] = None
    send_on_utc_date_start: Optional[str] = None
    send_on_utc_date_end: Optional[str] = None
    updated_date_time_start: Optional[str] = None
    updated_date_time_end: Optional[str] = None
    take: int = 0
    token: Optional[str] = None


class QueueNotificationItem(BaseModel):
    """Message placed on the delivery queue."""

    application: str
    notification_ids: List[str]
    notification_type: NotificationType = NotificationType.MAIL
    resend: bool = False


class NotificationResponse(BaseModel):
    notification_id: str
    status: Optional[NotificationStatus] = None
    tracking_id: Optional[str] = None
    error_message: Optional[str] = None


class MailTemplate(BaseModel):
    """Stored mail template of an application.

    The table row keeps the metadata; ``content`` lives in the blob store and
    is only populated when a single template is read.
    """

    template_id: str
    application: str
    description: Optional[str] = None
    template_type: str = "Text"
    content: Optional[str] = None
    blob_locator: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.application

    @property
    def row_key(self) -> str:
        return self.template_id
