"""Blob store for externalized message bodies and attachments.

Content crosses this interface base64 encoded.
"""

import asyncio
import base64
import binascii
import threading
from typing import Dict, Optional, Protocol

from infrastructure.operations import OperationStatus
from integrations.aws import s3_next
from modules.notifications.errors import InvalidArgumentError, StoreOperationError


def _decode(content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidArgumentError("Blob content must be base64 encoded") from exc


class BlobStore(Protocol):
    async def upload(self, name: str, base64_content: str) -> str:
        """Store content under ``name``, overwriting, and return its locator."""
        ...

    async def download(self, name: str) -> Optional[str]:
        """Return base64 content, or None when no blob has that name."""
        ...

    async def delete(self, name: str) -> bool:
        """Delete a blob; False when it did not exist."""
        ...


class InMemoryBlobStore:
    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    async def upload(self, name: str, base64_content: str) -> str:
        data = _decode(base64_content)
        with self._lock:
            self._blobs[name] = data
        return f"memory://{name}"

    async def download(self, name: str) -> Optional[str]:
        with self._lock:
            data = self._blobs.get(name)
        if data is None:
            return None
        return base64.b64encode(data).decode("ascii")

    async def delete(self, name: str) -> bool:
        with self._lock:
            return self._blobs.pop(name, None) is not None


class S3BlobStore:
    def __init__(self, bucket_name: str) -> None:
        self.bucket_name = bucket_name

    async def upload(self, name: str, base64_content: str) -> str:
        result = await asyncio.to_thread(
            s3_next.put_object,
            bucket=self.bucket_name,
            key=name,
            Body=_decode(base64_content),
        )
        if not result.is_success:
            raise StoreOperationError(
                f"Upload of {name} failed: {result.message}", result=result
            )
        return f"s3://{self.bucket_name}/{name}"

    async def download(self, name: str) -> Optional[str]:
        result = await asyncio.to_thread(
            s3_next.get_object_bytes, bucket=self.bucket_name, key=name
        )
        if result.status == OperationStatus.NOT_FOUND:
            return None
        if not result.is_success:
            raise StoreOperationError(
                f"Download of {name} failed: {result.message}", result=result
            )
        return base64.b64encode(result.data).decode("ascii")

    async def delete(self, name: str) -> bool:
        result = await asyncio.to_thread(
            s3_next.delete_object, bucket=self.bucket_name, key=name
        )
        if not result.is_success:
            raise StoreOperationError(
                f"Delete of {name} failed: {result.message}", result=result
            )
        return bool(result.data)
