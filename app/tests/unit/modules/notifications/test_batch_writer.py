"""Unit tests for chunked transactional writes."""

import math
from unittest.mock import AsyncMock

import pytest

from infrastructure.operations import OperationResult, OperationStatus
from modules.notifications.batch_writer import split_list, write_batch
from modules.notifications.errors import InvalidArgumentError, StoreTransactionError
from modules.notifications.stores import TransactionAction

pytestmark = pytest.mark.unit


def _rows(n, application="Contoso"):
    return [
        {"partition_key": application, "row_key": f"n-{i}", "notification_id": f"n-{i}"}
        for i in range(n)
    ]


class TestSplitList:
    """Tests for split_list."""

    @pytest.mark.parametrize("length,size", [(0, 4), (1, 4), (4, 4), (10, 4), (9, 3)])
    def test_chunks_preserve_order_without_loss(self, length, size):
        """Chunks concatenate back to the input and respect the size."""
        items = list(range(length))

        chunks = list(split_list(items, size))

        assert len(chunks) == math.ceil(length / size)
        assert all(len(chunk) <= size for chunk in chunks)
        assert [item for chunk in chunks for item in chunk] == items

    def test_rejects_non_positive_size(self):
        """A zero chunk size is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            list(split_list([1, 2], 0))


class TestWriteBatch:
    """Tests for write_batch."""

    @pytest.mark.asyncio
    async def test_ten_rows_in_chunks_of_four(self, table_store):
        """Ten rows with chunk size 4 are written as transactions of 4, 4 and 2."""
        transactions = await write_batch(table_store, _rows(10), chunk_size=4)

        assert transactions == 3
        assert [len(ops) for ops in table_store.transaction_log] == [4, 4, 2]
        written = [op.row["row_key"] for ops in table_store.transaction_log for op in ops]
        assert written == [f"n-{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_action_is_applied_to_every_operation(self, table_store):
        """Every operation of every transaction carries the requested action."""
        await write_batch(
            table_store, _rows(5), chunk_size=2, action=TransactionAction.UPSERT_REPLACE
        )

        actions = {op.action for ops in table_store.transaction_log for op in ops}
        assert actions == {TransactionAction.UPSERT_REPLACE}

    @pytest.mark.asyncio
    async def test_empty_rows_issue_no_transaction(self, table_store):
        """Nothing to write means no transaction."""
        assert await write_batch(table_store, [], chunk_size=4) == 0
        assert table_store.transaction_log == []

    @pytest.mark.asyncio
    async def test_failure_stops_at_failing_chunk(self):
        """Earlier chunks stay committed; later chunks are not attempted."""
        failure = OperationResult.error(
            OperationStatus.TRANSIENT_ERROR, "throttled", error_code="RATE_LIMITED"
        )
        table = AsyncMock()
        table.submit_transaction.side_effect = [
            OperationResult.success(),
            failure,
            OperationResult.success(),
        ]

        with pytest.raises(StoreTransactionError) as exc_info:
            await write_batch(table, _rows(10), chunk_size=4)

        assert exc_info.value.chunk_index == 1
        assert exc_info.value.result is failure
        assert table.submit_transaction.await_count == 2

    @pytest.mark.asyncio
    async def test_add_of_existing_row_is_rejected(self, table_store):
        """ADD on an existing key fails the transaction with a conflict."""
        await write_batch(table_store, _rows(1))

        with pytest.raises(StoreTransactionError) as exc_info:
            await write_batch(table_store, _rows(1))

        assert exc_info.value.result.status == OperationStatus.CONFLICT
