"""Notification dispatch service.

Business operations on top of the history repositories and the delivery
queue: queue new notifications, resend existing ones, record delivery
outcomes reported by the worker, and serve reports.
"""

import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from infrastructure.logging import bind_operation_context, get_module_logger
from modules.notifications.batch_writer import split_list
from modules.notifications.errors import (
    InvalidArgumentError,
    NotificationNotFoundError,
)
from modules.notifications.lifecycle import (
    is_resend_eligible,
    is_terminal,
    validate_transition,
)
from modules.notifications.models import (
    DateTimeRange,
    NotificationItem,
    NotificationReportRequest,
    NotificationResponse,
    NotificationStatus,
    NotificationType,
    QueueNotificationItem,
)
from modules.notifications.queue import NotificationQueue
from modules.notifications.repository import NotificationHistoryRepository
from modules.notifications.serialization import utc_now

logger = get_module_logger()

DEFAULT_QUEUE_MESSAGE_CHUNK_SIZE = 10


class NotificationDispatchService:
    """Dispatch service over one repository per notification type.

    Args:
        repositories: History repository for each NotificationType.
        queue: Delivery queue receiving QueueNotificationItem messages.
        queue_message_chunk_size: Maximum notification ids per queue message.
    """

    def __init__(
        self,
        repositories: Dict[NotificationType, NotificationHistoryRepository],
        queue: NotificationQueue,
        queue_message_chunk_size: int = DEFAULT_QUEUE_MESSAGE_CHUNK_SIZE,
    ) -> None:
        self.repositories = repositories
        self.queue = queue
        self.queue_message_chunk_size = queue_message_chunk_size

    def repository(
        self, notification_type: NotificationType
    ) -> NotificationHistoryRepository:
        try:
            return self.repositories[notification_type]
        except KeyError as exc:
            raise InvalidArgumentError(
                f"No repository configured for {notification_type.value}"
            ) from exc

    async def _enqueue(
        self,
        application: str,
        notification_ids: Sequence[str],
        notification_type: NotificationType,
        resend: bool,
    ) -> int:
        messages = [
            QueueNotificationItem(
                application=application,
                notification_ids=chunk,
                notification_type=notification_type,
                resend=resend,
            )
            for chunk in split_list(
                list(notification_ids), self.queue_message_chunk_size
            )
        ]
        if messages:
            await self.queue.enqueue(messages)
        return len(messages)

    async def queue_notifications(
        self,
        application: str,
        items: Sequence[NotificationItem],
        notification_type: NotificationType = NotificationType.MAIL,
    ) -> List[NotificationResponse]:
        """Persist new notifications as Queued and enqueue them for delivery.

        Ids are assigned to items that have none; ``send_on_utc_date``
        defaults to now.
        """
        if not application:
            raise InvalidArgumentError("application is required")
        if not items:
            raise InvalidArgumentError("items must not be empty")

        with bind_operation_context(
            application=application, notification_type=notification_type.value
        ):
            now = utc_now()
            records = [
                item.model_copy(
                    update={
                        "notification_id": item.notification_id or str(uuid.uuid4()),
                        "application": application,
                        "notification_type": notification_type,
                        "status": NotificationStatus.QUEUED,
                        "try_count": 0,
                        "error_message": None,
                        "send_on_utc_date": item.send_on_utc_date or now,
                    }
                )
                for item in items
            ]
            created = await self.repository(notification_type).create(
                records, application
            )
            message_count = await self._enqueue(
                application,
                [record.notification_id for record in created],
                notification_type,
                resend=False,
            )
            logger.info(
                "notifications_queued",
                count=len(created),
                queue_messages=message_count,
            )
            return [
                NotificationResponse(
                    notification_id=record.notification_id,
                    status=record.status,
                    tracking_id=record.tracking_id,
                )
                for record in created
            ]

    async def _resend(
        self,
        application: str,
        records: Sequence[NotificationItem],
        notification_type: NotificationType,
        force: bool,
    ) -> Tuple[List[NotificationResponse], List[str]]:
        responses: List[NotificationResponse] = []
        resend_ids: List[str] = []
        for record in records:
            if is_resend_eligible(record.status, force=force):
                resend_ids.append(record.notification_id)
                responses.append(
                    NotificationResponse(
                        notification_id=record.notification_id,
                        status=record.status,
                        tracking_id=record.tracking_id,
                    )
                )
            else:
                responses.append(
                    NotificationResponse(
                        notification_id=record.notification_id,
                        status=record.status,
                        tracking_id=record.tracking_id,
                        error_message=(
                            f"Notification in status {record.status.value} "
                            "is not eligible for resend"
                        ),
                    )
                )
        await self._enqueue(application, resend_ids, notification_type, resend=True)
        return responses, resend_ids

    async def resend_notifications(
        self,
        application: str,
        notification_ids: Sequence[str],
        force: bool = False,
        notification_type: NotificationType = NotificationType.MAIL,
    ) -> List[NotificationResponse]:
        """Enqueue existing notifications for another delivery attempt.

        Only Failed notifications are resent unless ``force`` is set. The
        stored status is left as is; the worker moves it on when it picks the
        message up. Ids with no record for ``application`` are reported with
        an error message.
        """
        if not application:
            raise InvalidArgumentError("application is required")
        if not notification_ids:
            raise InvalidArgumentError("notification_ids must not be empty")

        with bind_operation_context(
            application=application, notification_type=notification_type.value
        ):
            found = await self.repository(notification_type).get(notification_ids)
            records = {
                record.notification_id: record
                for record in found
                if record.application == application
            }
            responses, resend_ids = await self._resend(
                application, list(records.values()), notification_type, force
            )
            missing = [nid for nid in notification_ids if nid not in records]
            responses.extend(
                NotificationResponse(
                    notification_id=nid,
                    error_message="Notification not found",
                )
                for nid in missing
            )
            logger.info(
                "notifications_resent",
                requested=len(notification_ids),
                resent=len(resend_ids),
                missing=len(missing),
                force=force,
            )
            return responses

    async def resend_by_date_range(
        self,
        application: str,
        date_range: DateTimeRange,
        status_list: Optional[Sequence[NotificationStatus]] = None,
        notification_type: NotificationType = NotificationType.MAIL,
    ) -> List[NotificationResponse]:
        """Resend notifications scheduled within ``date_range``.

        ``status_list`` defaults to Failed. Returns an empty list when nothing
        matches.
        """
        if not application:
            raise InvalidArgumentError("application is required")

        statuses = list(status_list or [NotificationStatus.FAILED])
        with bind_operation_context(
            application=application, notification_type=notification_type.value
        ):
            records = await self.repository(notification_type).get_pending_or_failed(
                date_range, application_name=application, status_list=statuses
            )
            if not records:
                logger.info("no_notifications_to_resend")
                return []
            responses, resend_ids = await self._resend(
                application, records, notification_type, force=True
            )
            logger.info(
                "notifications_resent_by_date_range",
                matched=len(records),
                resent=len(resend_ids),
            )
            return responses

    async def record_delivery_outcome(
        self,
        application: str,
        notification_id: str,
        status: NotificationStatus,
        error_message: Optional[str] = None,
        email_account_used: Optional[str] = None,
        try_count: Optional[int] = None,
        resend: bool = False,
        notification_type: NotificationType = NotificationType.MAIL,
    ) -> NotificationItem:
        """Apply a status change reported by the delivery worker.

        ``try_count`` only moves forward: a report carrying a lower count than
        the stored one keeps the stored count.

        Raises:
            NotificationNotFoundError: If ``application`` has no such record.
            InvalidStatusTransitionError: If the state machine forbids the move.
        """
        repository = self.repository(notification_type)
        with bind_operation_context(
            application=application,
            notification_type=notification_type.value,
            notification_id=notification_id,
        ):
            record = await repository.get_one(notification_id)
            if record.application != application:
                raise NotificationNotFoundError(notification_id)

            validate_transition(record.status, status, resend=resend)

            changes = {"status": status, "error_message": error_message}
            if email_account_used is not None:
                changes["email_account_used"] = email_account_used
            if try_count is not None:
                if try_count < record.try_count:
                    logger.warning(
                        "stale_try_count_ignored",
                        stored_try_count=record.try_count,
                        reported_try_count=try_count,
                    )
                changes["try_count"] = max(record.try_count, try_count)

            updated = await repository.update([record.model_copy(update=changes)])
            logger.info(
                "delivery_outcome_recorded",
                previous_status=record.status.value,
                status=status.value,
                terminal=is_terminal(status),
                try_count=updated[0].try_count,
            )
            return updated[0]

    async def get_report(
        self,
        request: NotificationReportRequest,
        notification_type: NotificationType = NotificationType.MAIL,
    ) -> Tuple[List[NotificationItem], str]:
        return await self.repository(notification_type).get_report(request)
