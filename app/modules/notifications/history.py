"""History query engine.

Turns a report request into a composed predicate, reads one page from the
table store and rebuilds typed records.
"""

from typing import List, Tuple, Type, TypeVar

from infrastructure.logging import get_module_logger
from modules.notifications.models import NotificationItem, NotificationReportRequest
from modules.notifications.predicates import compose_report_predicate
from modules.notifications.serialization import from_row
from modules.notifications.stores import TableStore, first_page

logger = get_module_logger()

DEFAULT_PAGE_SIZE = 100

ItemT = TypeVar("ItemT", bound=NotificationItem)


async def query_history(
    table: TableStore,
    request: NotificationReportRequest,
    item_cls: Type[ItemT],
    default_page_size: int = DEFAULT_PAGE_SIZE,
    legacy_updated_date_bounds: bool = False,
) -> Tuple[List[ItemT], str]:
    """Return one page of records matching ``request`` and the next token.

    The page holds at most ``request.take`` records (``default_page_size``
    when take is not positive). The token is empty once the store is
    exhausted.

    Raises:
        RecordDecodeError: If a matching row holds an unknown status,
            priority or sensitivity label.
    """
    predicate = compose_report_predicate(request, legacy_updated_date_bounds)
    page_size = request.take if request.take > 0 else default_page_size

    page = await first_page(
        table.query(
            predicate,
            page_size=page_size,
            continuation_token=request.token or None,
        )
    )
    records = [from_row(row, item_cls) for row in page.rows]

    logger.info(
        "history_page_read",
        item_type=item_cls.__name__,
        page_size=page_size,
        count=len(records),
        has_continuation_token=bool(page.continuation_token),
    )
    return records, page.continuation_token
