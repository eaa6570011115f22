"""Unit tests for blob stores and delivery queues."""

import base64
import json
from datetime import timedelta

import pytest

from infrastructure.operations import OperationResult, OperationStatus
from modules.notifications.blobs import InMemoryBlobStore, S3BlobStore
from modules.notifications.errors import InvalidArgumentError, StoreOperationError
from modules.notifications.models import NotificationType, QueueNotificationItem
from modules.notifications.queue import InMemoryQueue, SQSQueue

pytestmark = pytest.mark.unit

HELLO_B64 = base64.b64encode(b"hello").decode("ascii")


def _message(i=0):
    return QueueNotificationItem(
        application="Contoso",
        notification_ids=[f"n-{i}"],
        notification_type=NotificationType.MAIL,
    )


class TestInMemoryBlobStore:
    """Tests for InMemoryBlobStore."""

    @pytest.mark.asyncio
    async def test_upload_download_delete(self):
        """Content uploaded can be downloaded until deleted."""
        store = InMemoryBlobStore()

        locator = await store.upload("Contoso/Mail/n-1", HELLO_B64)

        assert locator == "memory://Contoso/Mail/n-1"
        assert await store.download("Contoso/Mail/n-1") == HELLO_B64
        assert await store.delete("Contoso/Mail/n-1") is True
        assert await store.download("Contoso/Mail/n-1") is None
        assert await store.delete("Contoso/Mail/n-1") is False

    @pytest.mark.asyncio
    async def test_rejects_non_base64(self):
        """Content must be base64."""
        with pytest.raises(InvalidArgumentError):
            await InMemoryBlobStore().upload("x", "not base64!")


class TestS3BlobStore:
    """Tests for S3BlobStore with mocked s3_next."""

    @pytest.mark.asyncio
    async def test_upload_sends_decoded_bytes(self, mock_s3_next):
        """Uploads put raw bytes and return an s3 locator."""
        mock_s3_next.put_object.return_value = OperationResult.success(data={})
        store = S3BlobStore("content-bucket")

        locator = await store.upload("Contoso/Mail/n-1", HELLO_B64)

        assert locator == "s3://content-bucket/Contoso/Mail/n-1"
        mock_s3_next.put_object.assert_called_once_with(
            bucket="content-bucket", key="Contoso/Mail/n-1", Body=b"hello"
        )

    @pytest.mark.asyncio
    async def test_download_missing_returns_none(self, mock_s3_next):
        """A missing key downloads as None."""
        mock_s3_next.get_object_bytes.return_value = OperationResult.error(
            OperationStatus.NOT_FOUND, "missing"
        )

        assert await S3BlobStore("b").download("nope") is None

    @pytest.mark.asyncio
    async def test_download_encodes_bytes(self, mock_s3_next):
        """Downloaded bytes are returned base64 encoded."""
        mock_s3_next.get_object_bytes.return_value = OperationResult.success(
            data=b"hello"
        )

        assert await S3BlobStore("b").download("k") == HELLO_B64

    @pytest.mark.asyncio
    async def test_failures_raise(self, mock_s3_next):
        """Other failures raise StoreOperationError."""
        mock_s3_next.get_object_bytes.return_value = OperationResult.permanent_error(
            "denied"
        )

        with pytest.raises(StoreOperationError):
            await S3BlobStore("b").download("k")

    @pytest.mark.asyncio
    async def test_delete_reports_existence(self, mock_s3_next):
        """delete returns whether the object existed."""
        mock_s3_next.delete_object.return_value = OperationResult.success(data=False)

        assert await S3BlobStore("b").delete("k") is False


class TestQueues:
    """Tests for InMemoryQueue and SQSQueue."""

    @pytest.mark.asyncio
    async def test_in_memory_queue_records_delay(self):
        """The in-memory queue keeps messages with their delay."""
        queue = InMemoryQueue()

        await queue.enqueue([_message(1)], visibility_delay=timedelta(seconds=30))

        assert queue.messages == [(_message(1), timedelta(seconds=30))]

    @pytest.mark.asyncio
    async def test_sqs_sends_batches_of_ten(self, mock_sqs_next):
        """Messages go out in SendMessageBatch calls of at most ten entries."""
        queue = SQSQueue("https://sqs.example/queue")

        await queue.enqueue([_message(i) for i in range(23)])

        sizes = [
            len(call.kwargs["Entries"])
            for call in mock_sqs_next.send_message_batch.call_args_list
        ]
        assert sizes == [10, 10, 3]
        entry = mock_sqs_next.send_message_batch.call_args_list[0].kwargs["Entries"][0]
        assert json.loads(entry["MessageBody"])["notification_ids"] == ["n-0"]
        assert "DelaySeconds" not in entry

    @pytest.mark.asyncio
    async def test_sqs_delay_is_capped(self, mock_sqs_next):
        """DelaySeconds is capped at fifteen minutes."""
        queue = SQSQueue("https://sqs.example/queue")

        await queue.enqueue([_message()], visibility_delay=timedelta(hours=1))

        entry = mock_sqs_next.send_message_batch.call_args.kwargs["Entries"][0]
        assert entry["DelaySeconds"] == 900

    @pytest.mark.asyncio
    async def test_sqs_failure_raises(self, mock_sqs_next):
        """A failed batch raises StoreOperationError."""
        mock_sqs_next.send_message_batch.return_value = OperationResult.transient_error(
            "throttled"
        )

        with pytest.raises(StoreOperationError):
            await SQSQueue("https://sqs.example/queue").enqueue([_message()])
