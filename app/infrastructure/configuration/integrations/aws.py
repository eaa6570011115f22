"""AWS integration settings."""

from typing import Optional

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """AWS configuration settings.

    Environment Variables:
        AWS_REGION: AWS region for services (default: ca-central-1)
        AWS_ENDPOINT_URL: Optional endpoint override (LocalStack, DynamoDB Local)
        AWS_NOTIFICATIONS_ROLE_ARN: Optional role assumed for storage access

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        region = settings.aws.AWS_REGION
        ```
    """

    AWS_REGION: str = Field(default="ca-central-1", alias="AWS_REGION")
    ENDPOINT_URL: Optional[str] = Field(default=None, alias="AWS_ENDPOINT_URL")
    NOTIFICATIONS_ROLE_ARN: str = Field(
        default="", alias="AWS_NOTIFICATIONS_ROLE_ARN"
    )

    THROTTLING_ERRS: list[str] = [
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
    ]
    RESOURCE_NOT_FOUND_ERRS: list[str] = ["ResourceNotFoundException", "NoSuchKey"]
