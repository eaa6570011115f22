"""
AWS Client Next Module

Centralized error handling, retry logic and standardized ``OperationResult``
responses for the AWS calls made by the notification stores.

Features:
- Throttling retry with exponential backoff
- Errors classified into OperationResult instead of raised
- Optional full pagination for list style operations (scan, query)
- Endpoint override and role assumption from settings

Usage:
    # Single call, response dict in result.data
    result = execute_aws_api_call(
        service_name="dynamodb",
        method="get_item",
        TableName="notifications-email-history",
        Key={"partition_key": {"S": "payroll"}, "row_key": {"S": "n-1"}},
    )

    # Every page of a scan, items concatenated in result.data
    result = execute_aws_api_call(
        service_name="dynamodb",
        method="scan",
        keys=["Items"],
        paginate=True,
        TableName="notifications-email-history",
    )
"""

import time
from typing import Any, Callable, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.configuration.settings import settings
from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_aws_error

logger = get_module_logger()

AWS_REGION = settings.aws.AWS_REGION
ENDPOINT_URL = settings.aws.ENDPOINT_URL
THROTTLING_ERRS = settings.aws.THROTTLING_ERRS

ERROR_CONFIG = {
    "retry_errors": THROTTLING_ERRS,
    "default_max_retries": 3,
    "default_backoff_factor": 0.5,
}


def _error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def _should_retry(error: Exception, attempt: int, max_attempts: int) -> bool:
    retry_errors = ERROR_CONFIG.get("retry_errors") or []
    return _error_code(error) in retry_errors and attempt < max_attempts


def _calculate_retry_delay(attempt: int) -> float:
    backoff = float(ERROR_CONFIG.get("default_backoff_factor", 0.5))
    return backoff * (2**attempt)


def get_aws_client(
    service_name: str,
    session_config: Optional[dict] = None,
    client_config: Optional[dict] = None,
    role_arn: Optional[str] = None,
    session_name: str = "NotificationsSession",
) -> BaseClient:
    """
    Create a boto3 AWS service client, optionally assuming a role.

    Args:
        service_name (str): The name of the AWS service.
        session_config (dict, optional): Session configuration.
        client_config (dict, optional): Client configuration.
        role_arn (str, optional): The ARN of the IAM role to assume.
        session_name (str): The name for the assumed role session.
    """
    session_config = session_config or {"region_name": AWS_REGION}
    client_config = client_config or {"region_name": AWS_REGION}
    if ENDPOINT_URL and "endpoint_url" not in client_config:
        client_config = {**client_config, "endpoint_url": ENDPOINT_URL}
    if role_arn:
        sts_client = boto3.client("sts")
        assumed_role = sts_client.assume_role(
            RoleArn=role_arn, RoleSessionName=session_name
        )
        credentials = assumed_role["Credentials"]
        session = boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            **session_config,
        )
    else:
        session = boto3.Session(**session_config)
    return session.client(service_name, **client_config)


def _paginate_all_results(
    client: BaseClient, method: str, keys: Optional[List[str]] = None, **kwargs
) -> List[dict]:
    paginator = client.get_paginator(method)
    results: List[dict] = []
    for page in paginator.paginate(**kwargs):
        if keys is None:
            for key, value in page.items():
                if key == "ResponseMetadata":
                    continue
                if isinstance(value, list):
                    results.extend(value)
        else:
            for key in keys:
                if key in page:
                    results.extend(page[key])
    return results


def execute_api_call(
    func_name: str,
    api_call: Callable[[], Any],
    max_retries: Optional[int] = None,
) -> OperationResult:
    """
    Run an AWS API call with throttling retry and error classification.

    Args:
        func_name (str): Name of the call for logging, e.g. ``dynamodb_scan``
        api_call (callable): The API call to execute
        max_retries (int, optional): Override default max retries

    Returns:
        OperationResult: SUCCESS with the call's return value in ``data``, or
        the classified error after retries are exhausted.
    """
    max_retry_attempts = (
        max_retries
        if max_retries is not None
        else int(ERROR_CONFIG.get("default_max_retries", 3))
    )

    for attempt in range(max_retry_attempts + 1):
        try:
            logger.debug(
                "aws_api_call_start",
                function=func_name,
                attempt=attempt + 1,
                max_attempts=max_retry_attempts + 1,
            )
            result = api_call()
            if attempt > 0:
                logger.info(
                    "aws_api_retry_success",
                    function=func_name,
                    attempt=attempt + 1,
                )
            return OperationResult.success(data=result)

        except (BotoCoreError, ClientError) as e:
            if _should_retry(e, attempt, max_retry_attempts):
                delay = _calculate_retry_delay(attempt)
                logger.warning(
                    "aws_api_retrying",
                    function=func_name,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                time.sleep(delay)
                continue

            result = classify_aws_error(e)
            log = logger.error
            if result.error_code == "CONDITION_FAILED":
                log = logger.warning
            log(
                "aws_api_error_final",
                function=func_name,
                error=str(e),
                error_code=_error_code(e),
                status=result.status.value,
            )
            return result

    # Unreachable: the final attempt either returns or classifies
    return OperationResult.transient_error(
        f"{func_name} failed after retries", error_code="RETRIES_EXHAUSTED"
    )


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    role_arn: Optional[str] = None,
    session_config: Optional[dict] = None,
    client_config: Optional[dict] = None,
    max_retries: Optional[int] = None,
    paginate: bool = False,
    **kwargs,
) -> OperationResult:
    """
    Execute one AWS API method with module-level error handling.

    Args:
        service_name (str): The name of the AWS service.
        method (str): The method to call on the service client.
        keys (list, optional): The keys to collect from paginated results.
        role_arn (str, optional): Role to assume. Defaults to the configured
            notifications role when one is set.
        session_config (dict, optional): Session configuration.
        client_config (dict, optional): Client configuration.
        max_retries (int, optional): Override default max retries.
        paginate (bool): Walk every page with the service paginator instead of
            returning the single raw response.
        **kwargs: Additional keyword arguments for the API call.

    Returns:
        OperationResult: Standardized result of the call.
    """
    effective_role = role_arn or settings.aws.NOTIFICATIONS_ROLE_ARN or None

    def api_call():
        client = get_aws_client(
            service_name, session_config, client_config, effective_role
        )
        if paginate:
            return _paginate_all_results(client, method, keys, **kwargs)
        return getattr(client, method)(**kwargs)

    return execute_api_call(
        f"{service_name}_{method}",
        api_call,
        max_retries=max_retries,
    )
