"""Infrastructure configuration module - public API.

Centralized configuration for the notification service using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    NotificationsSettings: Notification feature settings class
    StorageSettings: Storage backend settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    backend = settings.storage.backend
    page_size = settings.notifications.default_page_size
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features import NotificationsSettings
from infrastructure.configuration.infrastructure import StorageSettings

__all__ = ["Settings", "NotificationsSettings", "StorageSettings"]
