"""AWS S3 Next Module

Object operations for externalized message bodies, built on client_next.py.

Usage:
    result = put_object(bucket="notifications-content", key="payroll/Mail/n-1", Body=b"...")
"""

from typing import Any

from integrations.aws.client_next import execute_aws_api_call
from infrastructure.operations import OperationResult, OperationStatus


def put_object(bucket: str, key: str, Body: bytes, **kwargs) -> OperationResult:
    """Upload an object, overwriting any existing object with the same key."""
    return execute_aws_api_call(
        service_name="s3",
        method="put_object",
        Bucket=bucket,
        Key=key,
        Body=Body,
        **kwargs,
    )


def get_object_bytes(bucket: str, key: str, **kwargs) -> OperationResult:
    """Download an object and read its body.

    Returns:
        OperationResult: ``data`` holds the body bytes, NOT_FOUND when the key
        does not exist.
    """

    result = execute_aws_api_call(
        service_name="s3",
        method="get_object",
        Bucket=bucket,
        Key=key,
        **kwargs,
    )
    if not result.is_success:
        return result
    body: Any = result.data["Body"]
    return OperationResult.success(data=body.read())


def delete_object(bucket: str, key: str, **kwargs) -> OperationResult:
    """Delete an object.

    S3 does not report whether the key existed, so existence is checked
    first and reported in ``data`` as a bool.
    """
    head = execute_aws_api_call(
        service_name="s3",
        method="head_object",
        Bucket=bucket,
        Key=key,
    )
    if head.status == OperationStatus.NOT_FOUND:
        return OperationResult.success(data=False)
    if not head.is_success:
        return head

    result = execute_aws_api_call(
        service_name="s3",
        method="delete_object",
        Bucket=bucket,
        Key=key,
        **kwargs,
    )
    if not result.is_success:
        return result
    return OperationResult.success(data=True)
