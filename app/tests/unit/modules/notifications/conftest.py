"""Fixtures for notification module tests."""

from unittest.mock import MagicMock

import pytest

from infrastructure.operations import OperationResult


@pytest.fixture
def mock_dynamodb_next(monkeypatch):
    """dynamodb_next replacement shared by the DynamoDB-backed stores.

    Every helper succeeds with empty data unless a test overrides it.
    """
    mock = MagicMock()
    mock.transact_write_items.return_value = OperationResult.success(data={})
    mock.put_item.return_value = OperationResult.success(data={})
    mock.get_item.return_value = OperationResult.success(data=None)
    mock.scan.return_value = OperationResult.success(data={"Items": []})
    mock.query.return_value = OperationResult.success(data=[])
    monkeypatch.setattr("modules.notifications.stores.dynamodb_next", mock)
    monkeypatch.setattr("modules.notifications.event_store.dynamodb_next", mock)
    return mock


@pytest.fixture
def mock_s3_next(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr("modules.notifications.blobs.s3_next", mock)
    return mock


@pytest.fixture
def mock_sqs_next(monkeypatch):
    mock = MagicMock()
    mock.MAX_BATCH_ENTRIES = 10
    mock.send_message_batch.return_value = OperationResult.success(data=[])
    monkeypatch.setattr("modules.notifications.queue.sqs_next", mock)
    return mock
