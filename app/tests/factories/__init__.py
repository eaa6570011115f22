"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    BASE_TIME,
    make_email_notification,
    make_email_notifications,
    make_email_with_content,
    make_event_notification,
    make_meeting_notification,
    make_report_request,
)

__all__ = [
    "BASE_TIME",
    "make_email_notification",
    "make_email_notifications",
    "make_email_with_content",
    "make_event_notification",
    "make_meeting_notification",
    "make_report_request",
]
