"""
Dependency providers.

Provides application-scoped provider functions for settings and the
notification dispatch service.
"""

from infrastructure.services.providers import (
    get_settings,
    get_dispatch_service,
)

__all__ = [
    "get_settings",
    "get_dispatch_service",
]
