"""Table store interface and implementations for notification history.

A table store holds rows keyed by ``(partition_key, row_key)``. Writes are
submitted as transactions of ADD (insert, fails if the key exists),
UPSERT_REPLACE (insert or fully replace) or DELETE operations; every insert
or replace assigns a fresh ``etag`` and ``timestamp``. Reads are filtered
scans that yield pages holding at most ``page_size`` matching rows with a
continuation token.
"""

import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, OperationStatus
from integrations.aws import dynamodb_next
from modules.notifications.dynamodb_codec import (
    decode_continuation_token,
    deserialize_item,
    encode_continuation_token,
    serialize_item,
    serialize_value,
)
from modules.notifications.errors import InvalidArgumentError, StoreOperationError
from modules.notifications.predicates import Predicate, matches, to_filter_expression
from modules.notifications.serialization import format_timestamp, utc_now

logger = get_module_logger()

Row = Dict[str, Any]


class TransactionAction(str, Enum):
    ADD = "add"
    UPSERT_REPLACE = "upsert_replace"
    # Only the key attributes of the row are used; a missing row is a no-op
    DELETE = "delete"


@dataclass
class TableOperation:
    action: TransactionAction
    row: Row


@dataclass
class Page:
    """One page of matching rows; an empty token means the scan is exhausted."""

    rows: List[Row] = field(default_factory=list)
    continuation_token: str = ""


class TableStore(Protocol):
    """Storage interface for notification history rows."""

    async def submit_transaction(
        self, operations: Sequence[TableOperation]
    ) -> OperationResult:
        """Apply all operations atomically.

        Returns:
            SUCCESS, or CONFLICT when an ADD targets an existing key, or the
            classified store error. Nothing is applied unless SUCCESS.
        """
        ...

    def query(
        self,
        predicate: Predicate,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> AsyncIterator[Page]:
        """Yield pages of rows matching ``predicate``.

        Each page holds at most ``page_size`` rows (unbounded when None) and
        the token to resume after it.
        """
        ...

    async def get_entity(self, partition_key: str, row_key: str) -> Optional[Row]:
        ...


async def first_page(pages: AsyncIterator[Page]) -> Page:
    async for page in pages:
        return page
    return Page()


async def collect_rows(pages: AsyncIterator[Page]) -> List[Row]:
    return [row async for page in pages for row in page.rows]


def _stamp(row: Row) -> Row:
    stamped = dict(row)
    stamped["etag"] = uuid.uuid4().hex
    stamped["timestamp"] = format_timestamp(utc_now())
    return stamped


def _key(row: Row) -> Tuple[str, str]:
    try:
        return row["partition_key"], row["row_key"]
    except KeyError as exc:
        raise InvalidArgumentError(f"Row is missing key attribute {exc}") from exc


class InMemoryTableStore:
    """Thread-safe in-process table store.

    Rows are scanned in key order. ``transaction_log`` records the operations
    of every committed transaction.
    """

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._rows: Dict[Tuple[str, str], Row] = {}
        self._lock = threading.Lock()
        self.transaction_log: List[List[TableOperation]] = []

    async def submit_transaction(
        self, operations: Sequence[TableOperation]
    ) -> OperationResult:
        keys = [_key(op.row) for op in operations]
        if len(set(keys)) != len(keys):
            return OperationResult.permanent_error(
                "Transaction contains more than one operation on the same row",
                error_code="INVALID_REQUEST",
            )

        with self._lock:
            for op, key in zip(operations, keys):
                if op.action == TransactionAction.ADD and key in self._rows:
                    logger.warning(
                        "table_transaction_conflict",
                        table=self.name,
                        partition_key=key[0],
                        row_key=key[1],
                    )
                    return OperationResult.error(
                        OperationStatus.CONFLICT,
                        f"Row {key[0]}/{key[1]} already exists",
                        error_code="CONDITION_FAILED",
                    )
            for op, key in zip(operations, keys):
                if op.action == TransactionAction.DELETE:
                    self._rows.pop(key, None)
                else:
                    self._rows[key] = _stamp(op.row)
            self.transaction_log.append(list(operations))

        return OperationResult.success(data={"count": len(operations)})

    async def query(
        self,
        predicate: Predicate,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> AsyncIterator[Page]:
        start_key = decode_continuation_token(continuation_token)
        with self._lock:
            keys = sorted(self._rows)
            snapshot = {key: dict(self._rows[key]) for key in keys}

        if start_key is not None:
            resume_after = (start_key.get("partition_key"), start_key.get("row_key"))
            if not all(isinstance(part, str) for part in resume_after):
                raise InvalidArgumentError(
                    f"Invalid continuation token: {continuation_token!r}"
                )
            keys = [key for key in keys if key > resume_after]

        rows: List[Row] = []
        for index, key in enumerate(keys):
            row = snapshot[key]
            if not matches(predicate, row):
                continue
            rows.append(row)
            if page_size is not None and len(rows) >= page_size:
                more = index < len(keys) - 1
                token = (
                    encode_continuation_token(
                        {"partition_key": key[0], "row_key": key[1]}
                    )
                    if more
                    else ""
                )
                yield Page(rows=rows, continuation_token=token)
                rows = []
                if not more:
                    return
        if rows or page_size is None:
            yield Page(rows=rows)

    async def get_entity(self, partition_key: str, row_key: str) -> Optional[Row]:
        with self._lock:
            row = self._rows.get((partition_key, row_key))
            return dict(row) if row is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


class DynamoDBTableStore:
    """DynamoDB-backed table store.

    Table Schema:
        PK: partition_key (String)
        SK: row_key (String)

    Transactions map to TransactWriteItems; ADD is a Put conditioned on
    ``attribute_not_exists(row_key)`` and DELETE an unconditional Delete.
    Queries are filtered Scans resumed from the opaque token (an encoded
    ``LastEvaluatedKey``).
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        logger.info("dynamodb_table_store_initialized", table_name=table_name)

    def _transact_item(self, op: TableOperation) -> Dict[str, Any]:
        if op.action == TransactionAction.DELETE:
            partition_key, row_key = _key(op.row)
            return {
                "Delete": {
                    "TableName": self.table_name,
                    "Key": {
                        "partition_key": {"S": partition_key},
                        "row_key": {"S": row_key},
                    },
                }
            }
        put: Dict[str, Any] = {
            "TableName": self.table_name,
            "Item": serialize_item(_stamp(op.row)),
        }
        if op.action == TransactionAction.ADD:
            put["ConditionExpression"] = "attribute_not_exists(row_key)"
        return {"Put": put}

    async def submit_transaction(
        self, operations: Sequence[TableOperation]
    ) -> OperationResult:
        if not operations:
            return OperationResult.success(data={"count": 0})
        transact_items = [self._transact_item(op) for op in operations]
        result = await asyncio.to_thread(
            dynamodb_next.transact_write_items, TransactItems=transact_items
        )
        if not result.is_success:
            logger.error(
                "table_transaction_failed",
                table=self.table_name,
                count=len(operations),
                status=result.status.value,
                error=result.message,
                error_code=result.error_code,
            )
            return result
        return OperationResult.success(data={"count": len(operations)})

    def _scan_kwargs(self, predicate: Predicate) -> Dict[str, Any]:
        expression = to_filter_expression(predicate)
        if expression is None:
            return {}
        filter_expression, names, values = expression
        return {
            "FilterExpression": filter_expression,
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": {
                placeholder: serialize_value(value)
                for placeholder, value in values.items()
            },
        }

    async def query(
        self,
        predicate: Predicate,
        page_size: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> AsyncIterator[Page]:
        scan_kwargs = self._scan_kwargs(predicate)
        start_key = decode_continuation_token(continuation_token)

        while True:
            rows: List[Row] = []
            # Limit counts evaluated items, so a page never overshoots page_size
            while page_size is None or len(rows) < page_size:
                kwargs = dict(scan_kwargs)
                if page_size is not None:
                    kwargs["Limit"] = page_size - len(rows)
                if start_key is not None:
                    kwargs["ExclusiveStartKey"] = start_key
                result = await asyncio.to_thread(
                    dynamodb_next.scan,
                    table_name=self.table_name,
                    paginate=False,
                    **kwargs,
                )
                if not result.is_success:
                    logger.error(
                        "table_scan_failed",
                        table=self.table_name,
                        error=result.message,
                        error_code=result.error_code,
                    )
                    raise StoreOperationError(
                        f"Scan of {self.table_name} failed: {result.message}",
                        result=result,
                    )
                response = result.data or {}
                rows.extend(deserialize_item(item) for item in response.get("Items", []))
                start_key = response.get("LastEvaluatedKey")
                if start_key is None or page_size is None:
                    break

            yield Page(rows=rows, continuation_token=encode_continuation_token(start_key))
            if start_key is None:
                return

    async def get_entity(self, partition_key: str, row_key: str) -> Optional[Row]:
        result = await asyncio.to_thread(
            dynamodb_next.get_item,
            table_name=self.table_name,
            Key={
                "partition_key": {"S": partition_key},
                "row_key": {"S": row_key},
            },
        )
        if not result.is_success:
            raise StoreOperationError(
                f"Read of {partition_key}/{row_key} failed: {result.message}",
                result=result,
            )
        return deserialize_item(result.data) if result.data else None
