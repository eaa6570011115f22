"""Notification service configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from infrastructure.configuration.integrations import AwsSettings
from infrastructure.configuration.features import NotificationsSettings
from infrastructure.configuration.infrastructure import StorageSettings


class Settings(BaseSettings):
    """Notification service configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object:

    - **Integrations**: AWS region, endpoint and role
    - **Features**: notification batching, paging and report options
    - **Infrastructure**: storage backend selection and resource names

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        table = settings.storage.email_history_table_name
        chunk_size = settings.notifications.batch_size_to_store

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    aws: AwsSettings
    notifications: NotificationsSettings
    storage: StorageSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "aws": AwsSettings,
            "notifications": NotificationsSettings,
            "storage": StorageSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()
