"""Error classifier for AWS SDK exceptions.

Converts botocore exceptions raised by DynamoDB, S3 and SQS calls into
``OperationResult`` objects.

Usage:
    from infrastructure.operations.classifiers import classify_aws_error

    try:
        response = client.put_item(TableName=table, Item=item)
    except Exception as exc:
        return classify_aws_error(exc)
"""

from botocore.exceptions import ClientError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

THROTTLING_CODES = frozenset(
    {
        "ThrottlingException",
        "Throttling",
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "SlowDown",
    }
)

NOT_FOUND_CODES = frozenset(
    {
        "ResourceNotFoundException",
        "NoSuchKey",
        "NoSuchBucket",
        "404",
        "AWS.SimpleQueueService.NonExistentQueue",
        "QueueDoesNotExist",
    }
)

VALIDATION_CODES = frozenset(
    {
        "ValidationException",
        "InvalidParameterException",
        "InvalidParameterValue",
        "BadRequestException",
        "SerializationException",
    }
)


def _cancellation_codes(exc: ClientError) -> list[str]:
    reasons = exc.response.get("CancellationReasons") or []
    return [reason.get("Code", "None") for reason in reasons]


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    Error Code Mapping:
    - Throttling codes: TRANSIENT_ERROR with retry_after
    - ConditionalCheckFailedException: CONFLICT
    - TransactionCanceledException caused by a condition check: CONFLICT,
      with the per-action cancellation codes in ``data``
    - AccessDeniedException: PERMANENT_ERROR
    - Not found codes (tables, keys, buckets, queues): NOT_FOUND
    - Validation codes: PERMANENT_ERROR
    - Other: TRANSIENT_ERROR (AWS convention)

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult with appropriate status, message, error_code, and
        retry_after (if applicable)
    """
    if not isinstance(exc, ClientError):
        # BotoCoreError (endpoint connection, read timeout) and friends
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error_code = "Unknown"
    if exc.response:
        error_code = exc.response.get("Error", {}).get("Code", "Unknown")

    if error_code in THROTTLING_CODES:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "AWS API throttled",
            error_code="RATE_LIMITED",
            retry_after=60,
        )

    if error_code == "ConditionalCheckFailedException":
        return OperationResult.error(
            OperationStatus.CONFLICT,
            "AWS conditional check failed",
            error_code="CONDITION_FAILED",
        )

    if error_code == "TransactionCanceledException":
        codes = _cancellation_codes(exc)
        if "ConditionalCheckFailed" in codes:
            return OperationResult.error(
                OperationStatus.CONFLICT,
                "AWS transaction cancelled by a condition check",
                error_code="CONDITION_FAILED",
                data=codes,
            )
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "AWS transaction cancelled",
            error_code="TRANSACTION_CANCELLED",
            data=codes,
        )

    if error_code in ("AccessDeniedException", "AccessDenied"):
        return OperationResult.permanent_error(
            "AWS API access denied",
            error_code="FORBIDDEN",
        )

    if error_code in NOT_FOUND_CODES:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "AWS resource not found",
            error_code="NOT_FOUND",
        )

    if error_code in VALIDATION_CODES:
        return OperationResult.permanent_error(
            f"AWS validation error: {error_code}",
            error_code="INVALID_REQUEST",
        )

    # Unknown errors are treated as transient
    return OperationResult.transient_error(
        f"AWS client error: {error_code}",
        error_code="AWS_CLIENT_ERROR",
    )
