# =============================================================================
# camp_core/offline/sync_engine.py
# Automatic Synchronization Engine
# =============================================================================
"""
SyncEngine - keeps the in-memory tree, the local cache and the remote document
in step.

Features:
- Cache-first startup (instant render from the local cache)
- Debounced saves: a burst of edits becomes one write of the latest tree
- Change feed with self-echo suppression
- Sync status tracking and event callbacks

Conflicts are last-write-wins. A failed save is logged and left alone: no
retry, no rollback, nothing queued.
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from camp_core.config import ECHO_WINDOW, SAVE_DEBOUNCE
from camp_core.data.remote_store import RemoteDocumentStore, RemoteSnapshot, Subscription
from camp_core.logging import LogContext
from camp_core.models.entities import RegionTree
from camp_core.offline.connection_manager import ConnectionManager, ConnectionStatus
from camp_core.offline.local_cache import LocalCache
from camp_core.state.region_store import ChangeSource, RegionStore, StoreEvent

logger = logging.getLogger(__name__)


class SyncPhase(Enum):
    """Engine lifecycle."""
    LOADING = "loading"
    LIVE = "live"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SyncStatusSnapshot:
    """Point-in-time sync status for the UI."""
    phase: SyncPhase
    is_saving: bool
    is_connected: bool
    has_pending_save: bool = False
    last_save_at: Optional[float] = None
    last_save_ok: Optional[bool] = None

    @property
    def label(self) -> str:
        if self.is_saving:
            return "Saving..."
        if self.is_connected:
            return "Real-time Updates"
        return "Local"


class SyncEngine:
    """
    Synchronization between the region store, the local cache and the remote
    document.

    Usage:
        engine = SyncEngine(store, remote, LocalCache(config.cache_dir))
        engine.start()
        store.dispatch(reducers.add_ward, region_id, "ওয়ার্ড-৪")   # saved ~1s later
        engine.stop()
    """

    def __init__(
        self,
        store: RegionStore,
        remote: RemoteDocumentStore,
        local_cache: LocalCache,
        connection: Optional[ConnectionManager] = None,
        debounce_seconds: float = SAVE_DEBOUNCE,
        echo_window: float = ECHO_WINDOW,
        clock: Callable[[], float] = time.time,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        """
        Args:
            store: Owner of the in-memory tree
            remote: Remote document adapter
            local_cache: Write-through local backup
            connection: Connection tracker; built from ``remote.exists`` if omitted
            debounce_seconds: Quiescence before a save fires
            echo_window: Feed deliveries this soon after a save are discarded
            clock: Wall-clock source (seconds)
            timer_factory: ``threading.Timer``-compatible one-shot timer
        """
        self.store = store
        self.remote = remote
        self.local_cache = local_cache
        self.connection = connection or ConnectionManager(
            remote.exists if remote.is_configured else None
        )
        self.debounce_seconds = debounce_seconds
        self.echo_window = echo_window
        self._clock = clock
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._phase = SyncPhase.LOADING
        self._is_saving = False
        self._last_save_at: Optional[float] = None
        self._last_save_ok: Optional[bool] = None
        self._timer = None
        self._save_generation = 0
        self._subscription: Optional[Subscription] = None
        self._store_unsubscribe: Optional[Callable[[], None]] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._callbacks: List[Callable[[SyncStatusSnapshot], None]] = []

        self.connection.register_callback(lambda _state: self._notify_callbacks())

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def is_saving(self) -> bool:
        return self._is_saving

    @property
    def last_save_at(self) -> Optional[float]:
        return self._last_save_at

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    @property
    def status(self) -> SyncStatusSnapshot:
        return SyncStatusSnapshot(
            phase=self._phase,
            is_saving=self._is_saving,
            is_connected=self.connection.is_online,
            has_pending_save=self.has_pending_save,
            last_save_at=self._last_save_at,
            last_save_ok=self._last_save_ok,
        )

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        status = self.status
        return {
            "phase": status.phase.value,
            "label": status.label,
            "is_saving": status.is_saving,
            "is_connected": status.is_connected,
            "pending": status.has_pending_save,
            "last_save_at": status.last_save_at,
            "last_save_ok": status.last_save_ok,
            "connection": self.connection.get_status_display(),
        }

    def register_callback(self, callback: Callable[[SyncStatusSnapshot], None]) -> None:
        """Register a callback for sync status changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncStatusSnapshot], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        status = self.status
        for callback in list(self._callbacks):
            try:
                callback(status)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, background_refresh: bool = True) -> None:
        """
        Load the tree and go live.

        A non-empty local cache is published at once and only the cache file
        is refreshed from a remote read; otherwise the remote read (seed on
        failure) is awaited and published. The change feed is opened last.

        Args:
            background_refresh: Run the cache refresh on a daemon thread
        """
        with self._lock:
            if self._store_unsubscribe is not None:
                return
            self._phase = SyncPhase.LOADING
            self._store_unsubscribe = self.store.subscribe(self._on_store_event)

        with LogContext(logger, "Loading regions"):
            cached = self.local_cache.load()
            if cached:
                logger.info(f"Rendering {len(cached)} regions from local cache")
                self.store.publish(cached, ChangeSource.STARTUP)
                if background_refresh:
                    self._refresh_thread = threading.Thread(
                        target=self._refresh_cache,
                        daemon=True,
                        name="CacheRefresh",
                    )
                    self._refresh_thread.start()
                else:
                    self._refresh_cache()
            else:
                regions = self.remote.read()
                if regions:
                    self.store.publish(regions, ChangeSource.STARTUP)
                    self.local_cache.save(regions)
                logger.info(f"Initial data loaded: {len(regions)} regions")

        if self.remote.is_configured:
            self._subscription = self.remote.subscribe(self._on_remote_snapshot)
        else:
            self.connection.mark_offline("Remote store not configured")
            logger.info("Running in local-only mode")

        with self._lock:
            self._phase = SyncPhase.LIVE
        self._notify_callbacks()
        logger.info("Sync engine started")

    def _refresh_cache(self) -> None:
        # The rendered tree is left alone; the change feed delivers remote state
        if not self.remote.is_configured:
            return
        regions = self.remote.read()
        if regions:
            self.local_cache.save(regions)
            logger.debug("Local cache refreshed from remote read")

    def stop(self) -> None:
        """
        Cancel the pending save (dropping it) and detach from feed and store.

        In-flight reads and writes are left to finish unobserved.
        """
        with self._lock:
            if self._cancel_pending_save():
                logger.warning("Sync engine stopped with an unsaved change pending")
            subscription, self._subscription = self._subscription, None
            unsubscribe, self._store_unsubscribe = self._store_unsubscribe, None
            self._phase = SyncPhase.STOPPED

        if subscription is not None:
            subscription.unsubscribe()
        if unsubscribe is not None:
            unsubscribe()
        logger.info("Sync engine stopped")

    # =========================================================================
    # SAVING
    # =========================================================================

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.source == ChangeSource.LOCAL:
            self._schedule_save()

    def _schedule_save(self) -> None:
        with self._lock:
            if self._phase == SyncPhase.STOPPED:
                return
            self._cancel_pending_save()
            generation = self._save_generation
            self._timer = self._timer_factory(self.debounce_seconds, self._fire_save, [generation])
            self._timer.daemon = True
            self._timer.start()
        self._notify_callbacks()

    def _cancel_pending_save(self) -> bool:
        # Caller holds the lock. A timer past its wait ignores cancel(); the
        # new generation makes its late call a no-op
        self._save_generation += 1
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        return True

    def _fire_save(self, generation: int) -> None:
        with self._lock:
            if generation != self._save_generation or self._phase == SyncPhase.STOPPED:
                logger.debug("Skipping superseded save")
                return
            self._timer = None
            self._save_generation += 1
        self._save()

    def _save(self) -> None:
        """Write the latest tree to the local cache and the remote document."""
        with self._lock:
            regions = self.store.regions
            self._is_saving = True
            self._last_save_at = self._clock()
        self._notify_callbacks()

        try:
            self.local_cache.save(regions)
            if self.connection.check_connection().status != ConnectionStatus.ONLINE:
                self._last_save_ok = False
                logger.warning("Remote store unreachable; changes kept locally")
                return
            ok = self.remote.write(regions)
            self._last_save_ok = ok
            if ok:
                logger.info("Data saved successfully")
            else:
                logger.warning("Remote save failed; changes kept locally")
        except Exception as e:
            self._last_save_ok = False
            logger.error(f"Failed to save data: {e}", exc_info=True)
        finally:
            with self._lock:
                self._is_saving = False
            self._notify_callbacks()

    def flush(self) -> bool:
        """
        Run a pending save now.

        Returns:
            True if a save was pending
        """
        with self._lock:
            if not self._cancel_pending_save():
                return False
        self._save()
        return True

    # =========================================================================
    # RECEIVING
    # =========================================================================

    def _on_remote_snapshot(self, snapshot: RemoteSnapshot) -> None:
        if self._phase == SyncPhase.STOPPED:
            return

        if snapshot.fallback:
            # Feed is gone; adopt the seed it handed over
            self.connection.mark_offline("Change feed failed")
            self._adopt(snapshot.regions)
            return

        self.connection.mark_live()

        last_save_at = self._last_save_at
        if last_save_at is not None and self._clock() - last_save_at < self.echo_window:
            logger.debug("Ignoring real-time update - recent local save detected")
            return

        self._adopt(snapshot.regions)

    def _adopt(self, regions: RegionTree) -> None:
        if self.store.receive_remote(regions):
            logger.info("Data changed from external source, updating state")
            self.local_cache.save(regions)
        else:
            logger.debug("No changes detected, keeping current state")

    # =========================================================================
    # RESET
    # =========================================================================

    def reset_to_seed(self) -> RegionTree:
        """
        Replace everything with the seed tree: remote, memory and cache.

        Returns:
            The seed tree
        """
        with self._lock:
            self._cancel_pending_save()
            self._last_save_at = self._clock()

        with LogContext(logger, "Resetting to seed data"):
            seed = self.remote.reset()
            self.store.publish(seed, ChangeSource.RESET)
            self.local_cache.save(seed)

        self._notify_callbacks()
        return seed
