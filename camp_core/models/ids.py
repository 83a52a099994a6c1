# =============================================================================
# camp_core/models/ids.py
# Unique identifiers for new entities
# =============================================================================

import random
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 9


def generate_id(prefix: str = "id") -> str:
    """Return ``<prefix>-<epoch millis>-<random base-36 suffix>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ALPHABET, k=SUFFIX_LENGTH))
    return f"{prefix}-{millis}-{suffix}"


def generate_person_id() -> str:
    return generate_id("person")


def generate_union_id() -> str:
    return generate_id("union")


def generate_ward_id() -> str:
    return generate_id("ward")


def generate_region_id() -> str:
    return generate_id("region")
