# =============================================================================
# camp_core/services/validation.py
# Form validation for union, ward and person forms
# =============================================================================

from __future__ import annotations
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from camp_core.errors import ValidationError

PHONE_PATTERN = re.compile(r"^[\d+\-\s]+$", re.ASCII)

NAME_REQUIRED = "নাম আবশ্যক"
PHONE_REQUIRED = "ফোন নম্বর আবশ্যক"
PHONE_INVALID = "ফোন নম্বর সঠিক নয়"


class FormKind(Enum):
    UNION = "union"
    WARD = "ward"
    PERSON = "person"               # Ward responsible
    UNION_PERSON = "union-person"   # Union responsible

    @property
    def requires_phone(self) -> bool:
        return self in (FormKind.PERSON, FormKind.UNION_PERSON)

    @property
    def name_label(self) -> str:
        if self == FormKind.UNION:
            return "ইউনিয়নের নাম"
        if self == FormKind.WARD:
            return "ওয়ার্ডের নাম"
        return "নাম"


@dataclass(frozen=True)
class FormData:
    name: str
    phone: str = ""


def validate_form(kind: FormKind, name: Optional[str], phone: Optional[str] = "") -> FormData:
    """
    Validate and trim a submitted form.

    Raises:
        ValidationError: with one message per failing field
    """
    name = (name or "").strip()
    phone = (phone or "").strip()
    errors: Dict[str, str] = {}

    if not name:
        errors["name"] = NAME_REQUIRED

    if kind.requires_phone:
        if not phone:
            errors["phone"] = PHONE_REQUIRED
        elif not PHONE_PATTERN.match(phone):
            errors["phone"] = PHONE_INVALID

    if errors:
        raise ValidationError(f"Invalid {kind.value} form", field_errors=errors)

    return FormData(name=name, phone=phone)
