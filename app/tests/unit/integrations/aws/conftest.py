"""Fixtures for AWS integrations tests.

Level: Component-level fixtures for AWS integrations
"""

from unittest.mock import patch

import pytest


@pytest.fixture
def mock_execute():
    """Patch execute_aws_api_call in each *_next wrapper module."""
    with patch(
        "integrations.aws.dynamodb_next.execute_aws_api_call"
    ) as dynamodb, patch("integrations.aws.s3_next.execute_aws_api_call") as s3, patch(
        "integrations.aws.sqs_next.execute_aws_api_call"
    ) as sqs:
        yield {"dynamodb": dynamodb, "s3": s3, "sqs": sqs}


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []
    monkeypatch.setattr(
        "integrations.aws.client_next.time.sleep", lambda delay: delays.append(delay)
    )
    return delays
