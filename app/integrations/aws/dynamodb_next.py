"""AWS DynamoDB Next Module

Simplified, standardized functions for the DynamoDB operations used by the
notification stores, built on client_next.py.

Features:
- Consistent error handling and retries via client_next.execute_aws_api_call
- Standardized OperationResult responses
- Single-page query/scan for cursor based reads, full pagination on request

Usage:
    result = get_item(
        table_name="notifications-email-history",
        Key={"partition_key": {"S": "payroll"}, "row_key": {"S": "n-1"}},
    )
    if result.is_success:
        item = result.data  # None when the key does not exist
"""

from typing import Any, Dict, List

from integrations.aws.client_next import execute_aws_api_call
from infrastructure.operations import OperationResult


def get_item(
    table_name: str,
    Key: Dict[str, Any],
    **kwargs,
) -> OperationResult:
    """Get an item from DynamoDB table.

    Args:
        table_name: DynamoDB table name
        Key: Primary key attributes (DynamoDB format)
        **kwargs: Additional parameters for get_item call

    Returns:
        OperationResult: ``data`` is the item (DynamoDB format) or None
    """
    result = execute_aws_api_call(
        service_name="dynamodb",
        method="get_item",
        TableName=table_name,
        Key=Key,
        **kwargs,
    )
    if not result.is_success:
        return result
    return OperationResult.success(data=(result.data or {}).get("Item"))


def put_item(
    table_name: str,
    Item: Dict[str, Any],
    **kwargs,
) -> OperationResult:
    """Put an item into DynamoDB table.

    Args:
        table_name: DynamoDB table name
        Item: Item attributes (DynamoDB format)
        **kwargs: Additional parameters, e.g. ConditionExpression

    Returns:
        OperationResult: Success, CONFLICT when a condition fails, or error
    """
    return execute_aws_api_call(
        service_name="dynamodb",
        method="put_item",
        TableName=table_name,
        Item=Item,
        **kwargs,
    )


def transact_write_items(
    TransactItems: List[Dict[str, Any]],
    **kwargs,
) -> OperationResult:
    """Write up to 100 actions atomically.

    Returns:
        OperationResult: Success, or CONFLICT with cancellation codes in ``data``
    """
    return execute_aws_api_call(
        service_name="dynamodb",
        method="transact_write_items",
        TransactItems=TransactItems,
        **kwargs,
    )


def query(
    table_name: str,
    KeyConditionExpression: str,
    paginate: bool = True,
    **kwargs,
) -> OperationResult:
    """Query a DynamoDB table or index.

    Args:
        table_name: DynamoDB table name
        KeyConditionExpression: Query condition
        paginate: Collect every page into a list of items when True,
            otherwise return the raw single-page response
        **kwargs: Additional parameters for query call

    Returns:
        OperationResult: List of items, or the page response, or error details
    """
    if paginate:
        return execute_aws_api_call(
            service_name="dynamodb",
            method="query",
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            keys=["Items"],
            paginate=True,
            **kwargs,
        )
    return execute_aws_api_call(
        service_name="dynamodb",
        method="query",
        TableName=table_name,
        KeyConditionExpression=KeyConditionExpression,
        **kwargs,
    )


def scan(
    table_name: str,
    paginate: bool = True,
    **kwargs,
) -> OperationResult:
    """Scan a DynamoDB table.

    With ``paginate=False`` the raw response is returned so the caller can
    resume from ``LastEvaluatedKey`` via ``ExclusiveStartKey``.

    Args:
        table_name: DynamoDB table name
        paginate: Collect every page into a list of items when True
        **kwargs: Additional parameters for scan call (FilterExpression, Limit...)

    Returns:
        OperationResult: List of items, or the page response, or error details
    """
    if paginate:
        return execute_aws_api_call(
            service_name="dynamodb",
            method="scan",
            TableName=table_name,
            keys=["Items"],
            paginate=True,
            **kwargs,
        )
    return execute_aws_api_call(
        service_name="dynamodb",
        method="scan",
        TableName=table_name,
        **kwargs,
    )
