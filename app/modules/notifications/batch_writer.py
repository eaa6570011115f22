"""Chunked transactional writes to a table store."""

from typing import Any, Dict, Iterable, Iterator, List, Sequence, TypeVar

from infrastructure.logging import get_module_logger
from modules.notifications.errors import InvalidArgumentError, StoreTransactionError
from modules.notifications.stores import TableOperation, TableStore, TransactionAction

logger = get_module_logger()

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 4


def split_list(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive chunks of at most ``size`` items, in order."""
    if size <= 0:
        raise InvalidArgumentError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


async def write_batch(
    table: TableStore,
    rows: Iterable[Dict[str, Any]],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    action: TransactionAction = TransactionAction.ADD,
) -> int:
    """Write rows in chunks, one transaction per chunk, sequentially.

    Chunks committed before a failing chunk stay committed.

    Args:
        table: TableStore receiving the transactions.
        rows: Row dicts to write.
        chunk_size: Maximum operations per transaction.
        action: TransactionAction applied to every row.

    Returns:
        Number of transactions issued.

    Raises:
        StoreTransactionError: On the first rejected chunk.
    """
    rows = list(rows)
    transactions = 0
    for index, chunk in enumerate(split_list(rows, chunk_size)):
        result = await table.submit_transaction(
            [TableOperation(action=action, row=row) for row in chunk]
        )
        if not result.is_success:
            logger.error(
                "batch_chunk_failed",
                chunk_index=index,
                chunk_size=len(chunk),
                committed_transactions=transactions,
                action=action.value,
                status=result.status.value,
                error=result.message,
            )
            raise StoreTransactionError(
                f"Transaction {index} of batch failed: {result.message}",
                result=result,
                chunk_index=index,
            )
        transactions += 1

    logger.info(
        "batch_written",
        transactions=transactions,
        rows=len(rows),
        action=action.value,
    )
    return transactions
