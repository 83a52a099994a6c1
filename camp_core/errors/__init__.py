# =============================================================================
# camp_core/errors/__init__.py
# Centralized Error Handling for the Election Camp Directory
# =============================================================================

from .exceptions import (
    CampError,
    RemoteTimeoutError,
    DocumentNotFoundError,
    PermissionDeniedError,
    RemoteStoreError,
    ValidationError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    safe_execute,
    ErrorContext,
    error_boundary,
)

__all__ = [
    # Exceptions
    "CampError",
    "RemoteTimeoutError",
    "DocumentNotFoundError",
    "PermissionDeniedError",
    "RemoteStoreError",
    "ValidationError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "safe_execute",
    "ErrorContext",
    "error_boundary",
]
