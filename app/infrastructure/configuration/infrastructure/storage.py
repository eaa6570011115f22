"""Storage backend infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class StorageSettings(InfrastructureSettings):
    """Storage backend configuration for notification history.

    Environment Variables:
        STORAGE_BACKEND: Backend type - 'memory' or 'aws' (default: memory)
        EMAIL_HISTORY_TABLE_NAME: DynamoDB table holding email records
        MEETING_HISTORY_TABLE_NAME: DynamoDB table holding meeting invite records
        EVENTS_TABLE_NAME: DynamoDB table mirroring delivery status for event consumers
        MAIL_TEMPLATE_TABLE_NAME: DynamoDB table holding mail template metadata
        BLOB_BUCKET_NAME: S3 bucket receiving externalized message bodies
        NOTIFICATION_QUEUE_URL: SQS queue URL for delivery messages

    Storage Backends:
        - memory: In-process stores (development, testing)
        - aws: DynamoDB tables, S3 bucket and SQS queue (production)

    Table Schema (history tables):
        PK: partition_key (String, the application name)
        SK: row_key (String, the notification id)

    Table Schema (mail template table):
        PK: partition_key (String, the application name)
        SK: row_key (String, the template id)

    Table Schema (events table):
        PK: id (String)
        GSI: external_id-index (external_id)
    """

    backend: str = Field(
        default="memory",
        alias="STORAGE_BACKEND",
        description="Storage backend: 'memory' or 'aws'",
    )
    email_history_table_name: str = Field(
        default="notifications-email-history",
        alias="EMAIL_HISTORY_TABLE_NAME",
        description="DynamoDB table name for email notification records",
    )
    meeting_history_table_name: str = Field(
        default="notifications-meeting-history",
        alias="MEETING_HISTORY_TABLE_NAME",
        description="DynamoDB table name for meeting invite records",
    )
    events_table_name: str = Field(
        default="notifications-events",
        alias="EVENTS_TABLE_NAME",
        description="DynamoDB table name for the event store mirror",
    )
    mail_template_table_name: str = Field(
        default="notifications-mail-templates",
        alias="MAIL_TEMPLATE_TABLE_NAME",
        description="DynamoDB table name for mail template metadata",
    )
    events_external_id_index: str = Field(
        default="external_id-index",
        alias="EVENTS_EXTERNAL_ID_INDEX",
        description="GSI on the events table keyed by external_id",
    )
    blob_bucket_name: str = Field(
        default="notifications-content",
        alias="BLOB_BUCKET_NAME",
        description="S3 bucket for externalized message bodies",
    )
    notification_queue_url: str = Field(
        default="",
        alias="NOTIFICATION_QUEUE_URL",
        description="SQS queue URL for delivery messages",
    )
