"""Event store holding the analytical mirror of each notification.

Documents are keyed by ``id`` and looked up by ``external_id`` (the
notification id).
"""

import asyncio
import threading
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult
from integrations.aws import dynamodb_next
from modules.notifications.dynamodb_codec import deserialize_item, serialize_item
from modules.notifications.errors import RecordDecodeError, StoreOperationError
from modules.notifications.models import EventNotification

logger = get_module_logger()


class EventStore(Protocol):
    async def find_by_external_id(
        self, external_id: str
    ) -> Optional[EventNotification]:
        """Return the document mirroring ``external_id``, or None."""
        ...

    async def upsert_item(self, item: EventNotification) -> OperationResult:
        """Insert or replace a document by ``id``."""
        ...


class InMemoryEventStore:
    def __init__(self) -> None:
        self._items: Dict[str, EventNotification] = {}
        self._lock = threading.Lock()

    async def find_by_external_id(
        self, external_id: str
    ) -> Optional[EventNotification]:
        with self._lock:
            for item in self._items.values():
                if item.external_id == external_id:
                    return item.model_copy(deep=True)
        return None

    async def upsert_item(self, item: EventNotification) -> OperationResult:
        with self._lock:
            self._items[item.id] = item.model_copy(deep=True)
        return OperationResult.success(data=item.id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class DynamoDBEventStore:
    """DynamoDB-backed event store.

    Table Schema:
        PK: id (String)
        GSI: external_id-index (external_id)
    """

    def __init__(self, table_name: str, external_id_index: str) -> None:
        self.table_name = table_name
        self.external_id_index = external_id_index

    async def find_by_external_id(
        self, external_id: str
    ) -> Optional[EventNotification]:
        result = await asyncio.to_thread(
            dynamodb_next.query,
            table_name=self.table_name,
            KeyConditionExpression="external_id = :external_id",
            IndexName=self.external_id_index,
            ExpressionAttributeValues={":external_id": {"S": external_id}},
        )
        if not result.is_success:
            raise StoreOperationError(
                f"Event store lookup of {external_id} failed: {result.message}",
                result=result,
            )
        items = result.data or []
        if not items:
            return None
        if len(items) > 1:
            logger.warning(
                "event_store_duplicate_external_id",
                external_id=external_id,
                count=len(items),
            )
        try:
            return EventNotification.model_validate(deserialize_item(items[0]))
        except ValidationError as exc:
            raise RecordDecodeError(str(exc), row_key=external_id) from exc

    async def upsert_item(self, item: EventNotification) -> OperationResult:
        result = await asyncio.to_thread(
            dynamodb_next.put_item,
            table_name=self.table_name,
            Item=serialize_item(item.model_dump(mode="json", exclude_none=True)),
        )
        if not result.is_success:
            raise StoreOperationError(
                f"Event store upsert of {item.id} failed: {result.message}",
                result=result,
            )
        return OperationResult.success(data=item.id)
