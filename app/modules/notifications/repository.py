"""Notification history repository.

Owns the table-store records of one notification type and keeps the event
store mirror in step on updates. The table store is the source of truth:
event-store reconciliation is best-effort and never fails an update.
"""

import asyncio
from typing import Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from infrastructure.logging import get_module_logger
from modules.notifications.attachments import AttachmentRepository
from modules.notifications.batch_writer import (
    DEFAULT_CHUNK_SIZE,
    split_list,
    write_batch,
)
from modules.notifications.errors import (
    DuplicateNotificationError,
    InvalidArgumentError,
    NotificationNotFoundError,
    StoreOperationError,
)
from modules.notifications.event_store import EventStore
from modules.notifications.history import DEFAULT_PAGE_SIZE, query_history
from modules.notifications.lifecycle import status_description
from modules.notifications.models import (
    DateTimeRange,
    NotificationItem,
    NotificationReportRequest,
    NotificationStatus,
    NotificationStatusDto,
)
from modules.notifications.predicates import (
    MAX_IN_OPERANDS,
    ComparisonOperator,
    Compare,
    Predicate,
    and_,
    any_of,
)
from modules.notifications.serialization import (
    format_timestamp,
    from_row,
    to_row,
    utc_now,
)
from modules.notifications.stores import TableStore, TransactionAction, collect_rows

logger = get_module_logger()

ItemT = TypeVar("ItemT", bound=NotificationItem)


class NotificationHistoryRepository(Generic[ItemT]):
    """Create, read and update notification records of one type.

    Args:
        table: Table store holding the history rows.
        event_store: Event store mirrored on update.
        attachments: Content externalization, used when an application is given.
        item_cls: Record class rebuilt from rows (email or meeting).
        batch_size: Rows per table-store transaction.
        default_page_size: Report page size when a request sets none.
        legacy_updated_date_bounds: Inverted updated-date report bounds.
    """

    def __init__(
        self,
        table: TableStore,
        event_store: EventStore,
        attachments: AttachmentRepository,
        item_cls: Type[ItemT],
        batch_size: int = DEFAULT_CHUNK_SIZE,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        legacy_updated_date_bounds: bool = False,
    ) -> None:
        self.table = table
        self.event_store = event_store
        self.attachments = attachments
        self.item_cls = item_cls
        self.batch_size = batch_size
        self.default_page_size = default_page_size
        self.legacy_updated_date_bounds = legacy_updated_date_bounds

    async def _find(self, predicate: Predicate) -> List[ItemT]:
        rows = await collect_rows(self.table.query(predicate))
        return [from_row(row, self.item_cls) for row in rows]

    async def create(
        self, records: Sequence[ItemT], application_name: Optional[str] = None
    ) -> List[ItemT]:
        """Insert new records.

        Content is moved to the blob store first when ``application_name`` is
        given.

        Raises:
            InvalidArgumentError: If ``records`` is empty.
            StoreTransactionError: If a chunk is rejected (for example an id
                that already exists); earlier chunks stay written.
        """
        if not records:
            raise InvalidArgumentError("records must not be empty")

        now = utc_now()
        stamped = [
            record.model_copy(
                update={
                    "created_date_time": record.created_date_time or now,
                    "updated_date_time": now,
                }
            )
            for record in records
        ]
        if application_name:
            stamped = await self.attachments.upload(stamped, application_name)

        transactions = await write_batch(
            self.table,
            [to_row(record) for record in stamped],
            chunk_size=self.batch_size,
            action=TransactionAction.ADD,
        )
        logger.info(
            "notifications_created",
            item_type=self.item_cls.__name__,
            count=len(stamped),
            transactions=transactions,
        )
        return stamped

    async def get(
        self, notification_ids: Sequence[str], application_name: Optional[str] = None
    ) -> List[ItemT]:
        """Return every record whose id is in ``notification_ids``.

        Ids are looked up in groups of at most MAX_IN_OPERANDS, one scan per
        group.
        """
        if not notification_ids:
            raise InvalidArgumentError("notification_ids must not be empty")

        items: List[ItemT] = []
        distinct_ids = list(dict.fromkeys(notification_ids))
        for chunk in split_list(distinct_ids, MAX_IN_OPERANDS):
            items.extend(await self._find(any_of("notification_id", chunk)))
        if application_name:
            items = await self.attachments.download(items, application_name)
        return items

    async def get_one(
        self, notification_id: str, application_name: Optional[str] = None
    ) -> ItemT:
        """Return the single record for ``notification_id``.

        Raises:
            NotificationNotFoundError: If no record has that id.
            DuplicateNotificationError: If more than one record has that id.
        """
        if not notification_id:
            raise InvalidArgumentError("notification_id must not be empty")

        items = await self.get([notification_id], application_name)
        if not items:
            raise NotificationNotFoundError(notification_id)
        if len(items) > 1:
            raise DuplicateNotificationError(notification_id)
        return items[0]

    async def update(self, records: Sequence[ItemT]) -> List[ItemT]:
        """Replace records, then mirror their status into the event store.

        Returns:
            The records as written, with ``updated_date_time`` stamped.
        """
        if not records:
            raise InvalidArgumentError("records must not be empty")

        now = utc_now()
        stamped = [
            record.model_copy(update={"updated_date_time": now}) for record in records
        ]
        transactions = await write_batch(
            self.table,
            [to_row(record) for record in stamped],
            chunk_size=self.batch_size,
            action=TransactionAction.UPSERT_REPLACE,
        )
        logger.info(
            "notifications_updated",
            item_type=self.item_cls.__name__,
            count=len(stamped),
            transactions=transactions,
        )

        await self._reconcile_event_store(stamped)
        return stamped

    async def _reconcile_one(self, record: ItemT) -> bool:
        event = await self.event_store.find_by_external_id(record.notification_id)
        if event is None:
            logger.info(
                "event_store_item_not_found",
                notification_id=record.notification_id,
            )
            return False

        status = NotificationStatusDto(
            code=record.status.code,
            name=record.status.value,
            description=status_description(record.status),
            last_modified_on=utc_now(),
        )
        result = await self.event_store.upsert_item(
            event.model_copy(update={"status": status})
        )
        if not result.is_success:
            raise StoreOperationError(result.message, result=result)
        return True

    async def _reconcile_event_store(self, records: Sequence[ItemT]) -> None:
        results = await asyncio.gather(
            *(self._reconcile_one(record) for record in records),
            return_exceptions=True,
        )
        mirrored = 0
        for record, result in zip(records, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "event_store_reconciliation_failed",
                    notification_id=record.notification_id,
                    error=str(result),
                    error_type=type(result).__name__,
                )
            elif result:
                mirrored += 1
        logger.debug(
            "event_store_reconciled",
            count=len(records),
            mirrored=mirrored,
        )

    async def get_pending_or_failed(
        self,
        date_range: Optional[DateTimeRange],
        application_name: Optional[str] = None,
        status_list: Optional[Sequence[NotificationStatus]] = None,
        load_body: bool = False,
    ) -> Optional[List[ItemT]]:
        """Records scheduled in ``[start_date, end_date)``.

        Narrowed to ``status_list`` and to ``application_name`` when given.
        The application is matched ignoring case, in-process, since the table
        store only compares exactly.

        Returns:
            The matching records, or None when nothing matches.
        """
        if (
            date_range is None
            or date_range.start_date is None
            or date_range.end_date is None
        ):
            raise InvalidArgumentError("date_range with start and end is required")

        predicate: Predicate = and_(
            Compare(
                "send_on_utc_date",
                ComparisonOperator.GE,
                format_timestamp(date_range.start_date),
            ),
            Compare(
                "send_on_utc_date",
                ComparisonOperator.LT,
                format_timestamp(date_range.end_date),
            ),
        )
        if status_list:
            predicate = and_(
                predicate, any_of("status", [status.value for status in status_list])
            )

        items = await self._find(predicate)
        if application_name:
            wanted = application_name.casefold()
            items = [item for item in items if item.application.casefold() == wanted]
        logger.info(
            "pending_or_failed_read",
            application=application_name,
            count=len(items),
        )
        if not items:
            return None
        if application_name and load_body:
            items = await self.attachments.download(items, application_name)
        return items

    async def get_report(
        self, request: NotificationReportRequest
    ) -> Tuple[List[ItemT], str]:
        return await query_history(
            self.table,
            request,
            self.item_cls,
            default_page_size=self.default_page_size,
            legacy_updated_date_bounds=self.legacy_updated_date_bounds,
        )
