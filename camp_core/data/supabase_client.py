# =============================================================================
# camp_core/data/supabase_client.py
# Supabase Client Configuration for the Election Camp Directory
# =============================================================================

from __future__ import annotations
import streamlit as st
from typing import Optional
import logging

from camp_core.config import CampConfig, load_config

logger = logging.getLogger(__name__)


def get_supabase_client(config: Optional[CampConfig] = None):
    """
    Initialize and return a Supabase client.

    Expects secrets in .streamlit/secrets.toml:
        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"

    Returns:
        Supabase client instance or None if not configured
    """
    config = config or load_config()
    if not config.has_supabase:
        logger.warning("Supabase credentials not found; running in local-only mode")
        return None

    try:
        from supabase import create_client, Client

        client: Client = create_client(config.supabase_url, config.supabase_key)
        logger.info("Supabase client created")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None


@st.cache_resource(ttl=3600)  # Cache for 1 hour, then refresh
def get_cached_supabase_client():
    """Process-wide client shared by every browser session."""
    return get_supabase_client()
