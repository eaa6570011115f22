"""Unit tests for the history query engine."""

import pytest

from modules.notifications.errors import InvalidArgumentError, RecordDecodeError
from modules.notifications.history import query_history
from modules.notifications.models import EmailNotificationItem, NotificationStatus
from modules.notifications.serialization import to_row
from modules.notifications.stores import TableOperation, TransactionAction
from tests.factories import (
    make_email_notification,
    make_email_notifications,
    make_report_request,
)

pytestmark = pytest.mark.unit


async def _seed(table_store, items):
    result = await table_store.submit_transaction(
        [TableOperation(TransactionAction.ADD, to_row(item)) for item in items]
    )
    assert result.is_success


class TestQueryHistory:
    """Tests for query_history."""

    @pytest.mark.asyncio
    async def test_pages_through_all_matches(self, table_store):
        """250 matching rows read with take=100 come back as 100, 100, 50."""
        await _seed(table_store, make_email_notifications(250))

        sizes = []
        token = None
        seen = set()
        while True:
            records, token = await query_history(
                table_store,
                make_report_request(take=100, token=token),
                EmailNotificationItem,
            )
            sizes.append(len(records))
            seen.update(record.notification_id for record in records)
            if not token:
                break

        assert sizes == [100, 100, 50]
        assert len(seen) == 250
        assert token == ""

    @pytest.mark.asyncio
    async def test_non_positive_take_uses_default_page_size(self, table_store):
        """take <= 0 falls back to the default page size."""
        await _seed(table_store, make_email_notifications(12))

        records, token = await query_history(
            table_store,
            make_report_request(take=0),
            EmailNotificationItem,
            default_page_size=5,
        )

        assert len(records) == 5
        assert token

    @pytest.mark.asyncio
    async def test_filters_by_application_and_status(self, table_store):
        """List criteria narrow the page."""
        await _seed(
            table_store,
            [
                make_email_notification("a-1", application="Contoso"),
                make_email_notification(
                    "a-2", application="Contoso", status=NotificationStatus.SENT
                ),
                make_email_notification(
                    "b-1", application="Fabrikam", status=NotificationStatus.SENT
                ),
            ],
        )

        records, token = await query_history(
            table_store,
            make_report_request(
                application_filter=["Contoso"],
                notification_status_filter=[NotificationStatus.SENT.code],
            ),
            EmailNotificationItem,
        )

        assert [record.notification_id for record in records] == ["a-2"]
        assert records[0].status == NotificationStatus.SENT
        assert token == ""

    @pytest.mark.asyncio
    async def test_filters_by_send_date(self, table_store):
        """send_on_utc_date bounds are inclusive."""
        await _seed(table_store, make_email_notifications(5))

        records, _ = await query_history(
            table_store,
            make_report_request(
                send_on_utc_date_start="2024-03-01T12:01:00Z",
                send_on_utc_date_end="2024-03-01T12:03:00Z",
            ),
            EmailNotificationItem,
        )

        assert [record.notification_id for record in records] == [
            "n-001",
            "n-002",
            "n-003",
        ]

    @pytest.mark.asyncio
    async def test_unparseable_dates_are_ignored(self, table_store):
        """A date bound that does not parse imposes no constraint."""
        await _seed(table_store, make_email_notifications(3))

        records, _ = await query_history(
            table_store,
            make_report_request(created_date_time_start="not a date"),
            EmailNotificationItem,
        )

        assert len(records) == 3

    @pytest.mark.asyncio
    async def test_unknown_status_code_filter_raises(self, table_store):
        """A status code outside the enum is rejected."""
        with pytest.raises(InvalidArgumentError):
            await query_history(
                table_store,
                make_report_request(notification_status_filter=[42]),
                EmailNotificationItem,
            )

    @pytest.mark.asyncio
    async def test_unknown_stored_status_raises_decode_error(self, table_store):
        """A row holding an unknown status label cannot be decoded."""
        row = to_row(make_email_notification("bad-1"))
        row["status"] = "Bogus"
        await table_store.submit_transaction(
            [TableOperation(TransactionAction.ADD, row)]
        )

        with pytest.raises(RecordDecodeError) as exc_info:
            await query_history(
                table_store, make_report_request(), EmailNotificationItem
            )

        assert exc_info.value.row_key == "bad-1"
