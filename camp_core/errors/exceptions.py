# =============================================================================
# camp_core/errors/exceptions.py
# Custom Exception Hierarchy for the Election Camp Directory
# =============================================================================

from typing import Optional, Dict, Any


class CampError(Exception):
    """
    Base exception for all directory errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "REMOTE_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "CAMP_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# REMOTE STORE EXCEPTIONS
# =============================================================================

class RemoteTimeoutError(CampError):
    """Raised when a remote read does not answer within the read timeout"""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        details = kwargs.pop("details", {})
        if timeout is not None:
            details["timeout"] = timeout

        super().__init__(
            message=message,
            code="REMOTE_001",
            details=details,
            **kwargs,
        )


class DocumentNotFoundError(CampError):
    """Raised when the remote document (or an entity in it) is absent"""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        document_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if table:
            details["table"] = table
        if document_id:
            details["document_id"] = document_id

        super().__init__(
            message=message,
            code="REMOTE_002",
            details=details,
            **kwargs,
        )


class PermissionDeniedError(CampError):
    """Raised when the remote store policy rejects a write"""

    def __init__(self, message: str, policy_code: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if policy_code:
            details["policy_code"] = policy_code

        super().__init__(
            message=message,
            code="REMOTE_003",
            details=details,
            **kwargs,
        )


class RemoteStoreError(CampError):
    """Raised for any other transport or store failure"""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="REMOTE_004",
            details=details,
            **kwargs,
        )


# =============================================================================
# FORM EXCEPTIONS
# =============================================================================

class ValidationError(CampError):
    """Raised when a form field is missing or malformed"""

    def __init__(
        self,
        message: str,
        field_errors: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        self.field_errors = dict(field_errors or {})
        if self.field_errors:
            details["fields"] = self.field_errors

        super().__init__(
            message=message,
            code="FORM_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(CampError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
