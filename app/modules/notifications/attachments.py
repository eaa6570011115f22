"""Externalizes message content to the blob store.

Body, template data and attachments of a record are packed into one JSON
document stored at ``{application}/{notification_type}/{notification_id}``;
the record keeps only the blob locator.
"""

import asyncio
import base64
import json
from typing import List, Optional, Sequence, TypeVar

from infrastructure.logging import get_module_logger
from modules.notifications.blobs import BlobStore
from modules.notifications.models import NotificationAttachment, NotificationItem

logger = get_module_logger()

ItemT = TypeVar("ItemT", bound=NotificationItem)


def blob_name(item: NotificationItem) -> str:
    return f"{item.application}/{item.notification_type.value}/{item.notification_id}"


def _has_content(item: NotificationItem) -> bool:
    return bool(item.body or item.template_data or item.attachments)


class AttachmentRepository:
    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    async def _upload_one(self, item: ItemT) -> ItemT:
        if not _has_content(item):
            return item
        document = {
            "body": item.body,
            "template_data": item.template_data,
            "attachments": [a.model_dump() for a in item.attachments],
        }
        content = base64.b64encode(json.dumps(document).encode("utf-8")).decode("ascii")
        locator = await self.blob_store.upload(blob_name(item), content)
        return item.model_copy(
            update={
                "body": None,
                "template_data": None,
                "attachments": [],
                "blob_locator": locator,
            }
        )

    async def _download_one(self, item: ItemT) -> ItemT:
        if not item.blob_locator:
            return item
        content: Optional[str] = await self.blob_store.download(blob_name(item))
        if content is None:
            logger.warning(
                "notification_content_missing",
                notification_id=item.notification_id,
                blob_locator=item.blob_locator,
            )
            return item
        document = json.loads(base64.b64decode(content))
        return item.model_copy(
            update={
                "body": document.get("body"),
                "template_data": document.get("template_data"),
                "attachments": [
                    NotificationAttachment.model_validate(a)
                    for a in document.get("attachments") or []
                ],
            }
        )

    async def upload(self, items: Sequence[ItemT], application: str) -> List[ItemT]:
        """Move content of ``items`` to the blob store; returns the slimmed records."""
        updated = await asyncio.gather(*(self._upload_one(item) for item in items))
        logger.debug(
            "notification_content_uploaded",
            application=application,
            count=sum(1 for item in updated if item.blob_locator),
        )
        return list(updated)

    async def download(
        self, items: Sequence[ItemT], application: str
    ) -> List[ItemT]:
        """Restore content of ``items`` from the blob store."""
        restored = await asyncio.gather(*(self._download_one(item) for item in items))
        logger.debug(
            "notification_content_downloaded",
            application=application,
            count=len(restored),
        )
        return list(restored)
