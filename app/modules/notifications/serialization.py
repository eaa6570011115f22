"""Conversion between notification records and table-store rows.

Rows are flat dicts keyed by snake_case attribute names. Datetimes are
stored as fixed-width UTC strings so that string comparison in the store
orders them chronologically.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type, TypeVar

import arrow
from pydantic import ValidationError

from modules.notifications.errors import RecordDecodeError
from modules.notifications.models import (
    MailSensitivity,
    NotificationItem,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Tried in order when a report date is not ISO 8601
LOOSE_DATE_FORMATS = [
    "MM/DD/YYYY HH:mm:ss",
    "MM/DD/YYYY HH:mm",
    "MM/DD/YYYY",
    "YYYY-MM-DD HH:mm:ss.S",
    "YYYY/MM/DD HH:mm:ss",
    "YYYY/MM/DD",
]

# Top-level datetime attributes of history rows
DATETIME_FIELDS = (
    "send_on_utc_date",
    "timestamp",
    "created_date_time",
    "updated_date_time",
    "start",
    "end",
)

ENUM_FIELDS = {
    "status": NotificationStatus,
    "priority": NotificationPriority,
    "sensitivity": MailSensitivity,
    "notification_type": NotificationType,
}

# Content moved to the blob store when a record is externalized
EXTERNALIZED_FIELDS = ("body", "template_data", "attachments")

ItemT = TypeVar("ItemT", bound=NotificationItem)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a UTC storage string; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def parse_date_best_effort(value: Optional[str]) -> Optional[datetime]:
    """Parse a loosely formatted date string, returning None when it cannot.

    Accepts ISO 8601 (with or without offset) and the LOOSE_DATE_FORMATS
    ("03/01/2024 10:00"). Values without an offset are taken as UTC. The
    result is in UTC; a date that falls outside the datetime range once
    converted is treated as unparsable.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    try:
        parsed = arrow.get(text)
    except (ValueError, TypeError, OverflowError):
        try:
            parsed = arrow.get(text, LOOSE_DATE_FORMATS)
        except (ValueError, TypeError, OverflowError):
            return None
    try:
        return parsed.to("UTC").datetime
    except (ValueError, OverflowError):
        return None


def to_row(item: NotificationItem) -> Dict[str, Any]:
    """Flatten a record into a table-store row.

    Unset optional attributes are omitted so that a replace write clears them.
    Externalized content is dropped when the record has a blob locator.
    """
    row = item.model_dump(mode="json", exclude_none=True)
    for field in DATETIME_FIELDS:
        value = getattr(item, field, None)
        if value is not None:
            row[field] = format_timestamp(value)
    if item.blob_locator:
        for field in EXTERNALIZED_FIELDS:
            row.pop(field, None)
    row["partition_key"] = item.partition_key
    row["row_key"] = item.row_key
    return row


def from_row(row: Dict[str, Any], item_cls: Type[ItemT]) -> ItemT:
    """Rebuild a typed record from a table-store row.

    Raises:
        RecordDecodeError: If an enum label, timestamp or other attribute
            cannot be decoded.
    """
    row_key = row.get("row_key")
    data = {k: v for k, v in row.items() if k not in ("partition_key", "row_key")}

    for field, enum_cls in ENUM_FIELDS.items():
        if field not in data:
            continue
        try:
            data[field] = enum_cls(data[field])
        except ValueError as exc:
            raise RecordDecodeError(
                f"Unknown {field} value {data[field]!r}", row_key=row_key
            ) from exc

    for field in DATETIME_FIELDS:
        value = data.get(field)
        if isinstance(value, str):
            try:
                data[field] = parse_timestamp(value)
            except ValueError as exc:
                raise RecordDecodeError(
                    f"Invalid {field} timestamp {value!r}", row_key=row_key
                ) from exc

    data.setdefault("notification_id", row_key)
    data.setdefault("application", row.get("partition_key"))

    try:
        return item_cls.model_validate(data)
    except ValidationError as exc:
        raise RecordDecodeError(str(exc), row_key=row_key) from exc
