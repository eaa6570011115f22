"""Delivery queue for notification messages."""

import asyncio
import threading
from datetime import timedelta
from typing import List, Optional, Protocol, Sequence, Tuple

from infrastructure.logging import get_module_logger
from integrations.aws import sqs_next
from modules.notifications.batch_writer import split_list
from modules.notifications.errors import StoreOperationError
from modules.notifications.models import QueueNotificationItem

logger = get_module_logger()

# SQS caps DelaySeconds at 15 minutes
MAX_DELAY_SECONDS = 900


class NotificationQueue(Protocol):
    async def enqueue(
        self,
        messages: Sequence[QueueNotificationItem],
        visibility_delay: Optional[timedelta] = None,
    ) -> None:
        ...


class InMemoryQueue:
    """Collects enqueued messages in ``messages`` as ``(message, delay)`` pairs."""

    def __init__(self) -> None:
        self.messages: List[Tuple[QueueNotificationItem, Optional[timedelta]]] = []
        self._lock = threading.Lock()

    async def enqueue(
        self,
        messages: Sequence[QueueNotificationItem],
        visibility_delay: Optional[timedelta] = None,
    ) -> None:
        with self._lock:
            self.messages.extend((message, visibility_delay) for message in messages)


class SQSQueue:
    def __init__(self, queue_url: str) -> None:
        self.queue_url = queue_url

    async def enqueue(
        self,
        messages: Sequence[QueueNotificationItem],
        visibility_delay: Optional[timedelta] = None,
    ) -> None:
        delay_seconds = None
        if visibility_delay is not None:
            delay_seconds = max(
                0, min(int(visibility_delay.total_seconds()), MAX_DELAY_SECONDS)
            )

        for chunk in split_list(list(messages), sqs_next.MAX_BATCH_ENTRIES):
            entries = []
            for index, message in enumerate(chunk):
                entry = {"Id": str(index), "MessageBody": message.model_dump_json()}
                if delay_seconds is not None:
                    entry["DelaySeconds"] = delay_seconds
                entries.append(entry)

            result = await asyncio.to_thread(
                sqs_next.send_message_batch, queue_url=self.queue_url, Entries=entries
            )
            if not result.is_success:
                logger.error(
                    "queue_send_failed",
                    queue_url=self.queue_url,
                    count=len(entries),
                    error=result.message,
                    error_code=result.error_code,
                )
                raise StoreOperationError(
                    f"Enqueue to {self.queue_url} failed: {result.message}",
                    result=result,
                )
