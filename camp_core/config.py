# =============================================================================
# camp_core/config.py
# Runtime configuration (Streamlit secrets with environment fallback)
# =============================================================================
"""
Configuration for the directory.

Expected secrets in .streamlit/secrets.toml:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [camp]                        # optional
    table = "election_camp_data"
    seed_url = "https://camp.example.org/regions.json"
    pdf_font_path = "fonts/NotoSansBengali-Regular.ttf"

Environment variables (SUPABASE_URL, SUPABASE_KEY, CAMP_TABLE, CAMP_SEED_URL,
CAMP_CACHE_DIR, CAMP_PDF_FONT) are used when secrets are not configured.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from camp_core.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_TABLE = "election_camp_data"
DEFAULT_DOCUMENT_ID = "regions-data"
DOCUMENT_VERSION = "1.0"
DEFAULT_CACHE_DIR = PROJECT_ROOT / "local_data" / "cache"

# Timings (seconds)
READ_TIMEOUT = 3.0          # Remote read race against this timer
READ_CACHE_TTL = 30.0       # In-process cache of the last good read
SAVE_DEBOUNCE = 1.0         # Quiescence before a save fires
ECHO_WINDOW = 3.0           # Snapshots this soon after a save are our own echo
POLL_INTERVAL = 2.0         # Change-feed polling period


@dataclass
class CampConfig:
    """Settings shared by the adapter, the sync engine and the UI."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    table: str = DEFAULT_TABLE
    document_id: str = DEFAULT_DOCUMENT_ID
    seed_url: Optional[str] = None
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR)
    pdf_font_path: Optional[str] = None

    read_timeout: float = READ_TIMEOUT
    read_cache_ttl: float = READ_CACHE_TTL
    save_debounce: float = SAVE_DEBOUNCE
    echo_window: float = ECHO_WINDOW
    poll_interval: float = POLL_INTERVAL

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def _read_secrets() -> Dict[str, Any]:
    """Flatten the relevant Streamlit secrets; empty when none are configured."""
    try:
        import streamlit as st

        values: Dict[str, Any] = {}
        if "supabase" in st.secrets:
            values["supabase_url"] = st.secrets["supabase"].get("url")
            values["supabase_key"] = st.secrets["supabase"].get("key")
        if "camp" in st.secrets:
            camp = st.secrets["camp"]
            for key in ("table", "document_id", "seed_url", "cache_dir", "pdf_font_path"):
                if key in camp:
                    values[key] = camp[key]
        return values
    except Exception as e:
        # No secrets.toml (tests, scripts) - environment only
        logger.debug(f"Streamlit secrets unavailable: {e}")
        return {}


def load_config(overrides: Optional[Dict[str, Any]] = None) -> CampConfig:
    """
    Build the configuration from secrets, then environment, then defaults.

    Args:
        overrides: Explicit values that win over every other source
    """
    values = {
        "supabase_url": os.getenv("SUPABASE_URL"),
        "supabase_key": os.getenv("SUPABASE_KEY"),
        "table": os.getenv("CAMP_TABLE"),
        "seed_url": os.getenv("CAMP_SEED_URL"),
        "cache_dir": os.getenv("CAMP_CACHE_DIR"),
        "pdf_font_path": os.getenv("CAMP_PDF_FONT"),
    }
    values.update({k: v for k, v in _read_secrets().items() if v})
    values.update(overrides or {})

    values = {k: v for k, v in values.items() if v is not None}
    if "cache_dir" in values:
        values["cache_dir"] = Path(values["cache_dir"])

    config = CampConfig(**values)
    logger.debug(
        f"Config loaded: table={config.table}, supabase={'yes' if config.has_supabase else 'no'}"
    )
    return config
