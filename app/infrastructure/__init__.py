"""Infrastructure modules for the notification dispatch service.

Centralized infrastructure components:
- configuration: Settings management (Settings, NotificationsSettings, StorageSettings)
- logging: Structured logging (configure_logging, get_module_logger, bind_operation_context)
- operations: Operation results and AWS error classification
- services: Application-scoped providers (get_settings, get_dispatch_service)
"""
