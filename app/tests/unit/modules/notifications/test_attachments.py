"""Unit tests for content externalization."""

import pytest

from modules.notifications.attachments import blob_name
from tests.factories import (
    make_email_notification,
    make_email_with_content,
    make_meeting_notification,
)

pytestmark = pytest.mark.unit


class TestAttachmentRepository:
    """Tests for AttachmentRepository upload/download."""

    def test_blob_name(self):
        """Blobs are named application/type/id."""
        assert blob_name(make_meeting_notification("m-1")) == "Contoso/Meet/m-1"

    @pytest.mark.asyncio
    async def test_upload_then_download_restores_content(
        self, attachment_repository, blob_store
    ):
        """Content moves to the blob store and comes back intact."""
        original = make_email_with_content("n-1")

        [slim] = await attachment_repository.upload([original], "Contoso")

        assert slim.body is None and slim.attachments == []
        assert slim.blob_locator == "memory://Contoso/Mail/n-1"
        assert await blob_store.download("Contoso/Mail/n-1") is not None

        [restored] = await attachment_repository.download([slim], "Contoso")

        assert restored.body == original.body
        assert restored.template_data == original.template_data
        assert restored.attachments == original.attachments

    @pytest.mark.asyncio
    async def test_records_without_content_are_untouched(self, attachment_repository):
        """Nothing is uploaded for a record with no content."""
        item = make_email_notification("n-2")

        [same] = await attachment_repository.upload([item], "Contoso")

        assert same.blob_locator is None

    @pytest.mark.asyncio
    async def test_missing_blob_keeps_record(self, attachment_repository):
        """A record whose blob is gone is returned as is."""
        item = make_email_notification("n-3", blob_locator="memory://Contoso/Mail/n-3")

        [same] = await attachment_repository.download([item], "Contoso")

        assert same == item
