# =============================================================================
# camp_core/offline/__init__.py
# Offline-First Synchronization for the Election Camp Directory
# =============================================================================
"""
Offline-first synchronization.

Architecture:
------------
    UI intents ──► RegionStore ──► SyncEngine ──(1s debounce)──► RemoteDocumentStore
                       ▲               │                               │
                       │               └──► LocalCache (backup)        │
                       └──── echo filter ◄──── change feed ◄───────────┘

The local cache renders the last known tree instantly at startup; the remote
document is the shared copy every client converges on (last write wins).
"""

from .connection_manager import ConnectionManager, ConnectionState, ConnectionStatus
from .local_cache import LocalCache
from .sync_engine import SyncEngine, SyncPhase, SyncStatusSnapshot

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "LocalCache",
    "SyncEngine",
    "SyncPhase",
    "SyncStatusSnapshot",
]
