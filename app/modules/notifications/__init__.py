"""Notification history, lifecycle and dispatch.

Public API:
    - NotificationDispatchService: queue, resend, record outcomes, report
    - NotificationHistoryRepository: per-type history with event-store mirroring
    - MailTemplateRepository: per-application mail template storage
    - create_dispatch_service(): build the service from settings
    - create_template_repository(): build the template repository from settings
"""

from modules.notifications.factory import (
    create_dispatch_service,
    create_template_repository,
)
from modules.notifications.repository import NotificationHistoryRepository
from modules.notifications.service import NotificationDispatchService
from modules.notifications.templates import MailTemplateRepository

__all__ = [
    "create_dispatch_service",
    "create_template_repository",
    "MailTemplateRepository",
    "NotificationDispatchService",
    "NotificationHistoryRepository",
]
