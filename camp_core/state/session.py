import logging
from dataclasses import dataclass

import streamlit as st

from camp_core.config import CampConfig, load_config
from camp_core.data.remote_store import RemoteDocumentStore
from camp_core.data.seed import SeedLoader
from camp_core.data.supabase_client import get_cached_supabase_client
from camp_core.logging import setup_logging
from camp_core.offline.local_cache import LocalCache
from camp_core.offline.sync_engine import SyncEngine
from camp_core.services.camp_service import CampService
from camp_core.state.region_store import RegionStore

logger = logging.getLogger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "camp_service": None,
    "debug_mode": False,
    "_seen_version": 0,
}


@dataclass
class CampRuntime:
    """Process-wide objects shared by every browser session."""
    config: CampConfig
    remote: RemoteDocumentStore
    store: RegionStore
    engine: SyncEngine


@st.cache_resource
def get_runtime() -> CampRuntime:
    """Build and start the sync engine once per server process."""
    setup_logging(level=logging.INFO, log_to_file=True)

    config = load_config()
    remote = RemoteDocumentStore(
        get_cached_supabase_client(),
        SeedLoader(url=config.seed_url),
        table=config.table,
        document_id=config.document_id,
        read_timeout=config.read_timeout,
        cache_ttl=config.read_cache_ttl,
        poll_interval=config.poll_interval,
    )
    store = RegionStore()
    engine = SyncEngine(
        store,
        remote,
        LocalCache(config.cache_dir),
        debounce_seconds=config.save_debounce,
        echo_window=config.echo_window,
    )
    engine.start()
    return CampRuntime(config=config, remote=remote, store=store, engine=engine)


def init_state():
    """Initialize session state with defaults and this session's service."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v

    if st.session_state["camp_service"] is None:
        runtime = get_runtime()
        st.session_state["camp_service"] = CampService(runtime.store, runtime.engine)
        st.session_state["_seen_version"] = runtime.store.version


def get_service() -> CampService:
    init_state()
    return st.session_state["camp_service"]
