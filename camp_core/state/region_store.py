# =============================================================================
# camp_core/state/region_store.py
# Owner of the canonical in-memory region tree
# =============================================================================
"""
RegionStore - the single place the region tree lives.

Local edits go through ``dispatch`` with a pure reducer, wholesale trees from
startup or reset go through ``publish``, trees from the change feed go through
``receive_remote``. Listeners are told about every change together with where
it came from, so the sync engine can save local edits without echoing remote
ones back.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List
import logging

from camp_core.models.entities import RegionTree

logger = logging.getLogger(__name__)


class ChangeSource(Enum):
    """Where a tree change came from."""
    LOCAL = "local"         # User edit through a reducer
    REMOTE = "remote"       # Change feed delivery
    STARTUP = "startup"     # Cache or initial read
    RESET = "reset"         # Reset to seed


@dataclass(frozen=True)
class StoreEvent:
    regions: RegionTree
    source: ChangeSource
    version: int


StoreListener = Callable[[StoreEvent], None]


class RegionStore:
    """
    Thread-safe holder of the current tree.

    Usage:
        store = RegionStore()
        store.dispatch(reducers.add_ward, "region-1", "ওয়ার্ড-১")
        unsubscribe = store.subscribe(on_change)
    """

    def __init__(self, regions: RegionTree = ()):
        self._regions: RegionTree = tuple(regions)
        self._version = 0
        self._lock = threading.RLock()
        self._listeners: List[StoreListener] = []

    @property
    def regions(self) -> RegionTree:
        return self._regions

    @property
    def version(self) -> int:
        """Number of changes published since creation."""
        return self._version

    def dispatch(self, reducer: Callable[..., RegionTree], *args, **kwargs) -> RegionTree:
        """
        Apply a reducer to the tree current at call time.

        Listeners are only notified when the reducer returned a new tree;
        reducers return their input unchanged when nothing matched.

        Returns:
            The tree after the reducer ran
        """
        with self._lock:
            current = self._regions
            updated = reducer(current, *args, **kwargs)
            if updated is current:
                logger.debug(f"{getattr(reducer, '__name__', 'reducer')} changed nothing")
                return current
            event = self._replace(updated, ChangeSource.LOCAL)
        self._notify(event)
        return updated

    def publish(self, regions: RegionTree, source: ChangeSource = ChangeSource.STARTUP) -> None:
        """Replace the whole tree."""
        with self._lock:
            event = self._replace(tuple(regions), source)
        self._notify(event)

    def receive_remote(self, regions: RegionTree) -> bool:
        """
        Adopt a tree from the change feed unless it equals the current one.

        Returns:
            True if the tree was replaced
        """
        regions = tuple(regions)
        with self._lock:
            if regions == self._regions:
                return False
            event = self._replace(regions, ChangeSource.REMOTE)
        self._notify(event)
        return True

    def _replace(self, regions: RegionTree, source: ChangeSource) -> StoreEvent:
        self._regions = regions
        self._version += 1
        return StoreEvent(regions=regions, source=source, version=self._version)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error in store listener: {e}", exc_info=True)
