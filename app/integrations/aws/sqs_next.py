"""AWS SQS Next Module

Batch message publishing for delivery requests, built on client_next.py.
"""

from typing import Any, Dict, List

from integrations.aws.client_next import execute_aws_api_call
from infrastructure.operations import OperationResult, OperationStatus

# Hard limit of SendMessageBatch
MAX_BATCH_ENTRIES = 10


def send_message_batch(
    queue_url: str,
    Entries: List[Dict[str, Any]],
    **kwargs,
) -> OperationResult:
    """Send up to ten messages in one request.

    SQS reports per-entry failures inside a successful response; any failed
    entry turns the result into an error carrying the failed entries in
    ``data``.

    Args:
        queue_url: The URL of the SQS queue
        Entries: SendMessageBatch entries (Id, MessageBody, ...)

    Returns:
        OperationResult: Success with the successful entries, or error details
    """
    if len(Entries) > MAX_BATCH_ENTRIES:
        return OperationResult.permanent_error(
            f"send_message_batch accepts at most {MAX_BATCH_ENTRIES} entries",
            error_code="INVALID_REQUEST",
        )

    result = execute_aws_api_call(
        service_name="sqs",
        method="send_message_batch",
        QueueUrl=queue_url,
        Entries=Entries,
        **kwargs,
    )
    if not result.is_success:
        return result

    failed = result.data.get("Failed") or []
    if failed:
        sender_fault = any(entry.get("SenderFault") for entry in failed)
        return OperationResult.error(
            (
                OperationStatus.PERMANENT_ERROR
                if sender_fault
                else OperationStatus.TRANSIENT_ERROR
            ),
            f"{len(failed)} of {len(Entries)} queue messages failed",
            error_code="PARTIAL_BATCH_FAILURE",
            data=failed,
        )
    return OperationResult.success(data=result.data.get("Successful") or [])
