# =============================================================================
# camp_core/services/__init__.py
# Service Layer for the Election Camp Directory
# Separates form handling from UI presentation
# =============================================================================

from .base_service import BaseService, ServiceResult
from .camp_service import CampService, MAX_UNION_RESPONSIBLE
from .validation import FormKind, FormData, validate_form

__all__ = [
    "BaseService",
    "ServiceResult",
    "CampService",
    "MAX_UNION_RESPONSIBLE",
    "FormKind",
    "FormData",
    "validate_form",
]
