"""Shared base classes for settings modules."""

from pydantic_settings import BaseSettings, SettingsConfigDict

_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=True,
    extra="ignore",
)


class IntegrationSettings(BaseSettings):
    """Base class for external service settings (AWS).

    Subclasses read case-sensitive environment variables and the local
    ``.env`` file, ignoring unknown keys.
    """

    model_config = _SETTINGS_CONFIG


class FeatureSettings(BaseSettings):
    """Base class for feature module settings (notifications)."""

    model_config = _SETTINGS_CONFIG


class InfrastructureSettings(BaseSettings):
    """Base class for infrastructure-level settings.

    Infrastructure settings select storage backends and name the tables,
    buckets and queues the notification stores are bound to.
    """

    model_config = _SETTINGS_CONFIG
