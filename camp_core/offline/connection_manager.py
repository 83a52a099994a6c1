# =============================================================================
# camp_core/offline/connection_manager.py
# Connection Status Detection and Management
# =============================================================================
"""
ConnectionManager - tracks whether the remote document store is reachable.

Status comes from two places: an explicit probe (the adapter's ``exists``)
run before each save, and the change feed, which proves the store is live
whenever it delivers. The status drives the "Real-time / Local only" badge.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
import logging

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"           # Remote store reachable
    OFFLINE = "offline"         # Local-only mode
    CHECKING = "checking"       # Probe in progress
    UNKNOWN = "unknown"         # Initial state


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


class ConnectionManager:
    """
    Connection status for one remote store.

    Usage:
        manager = ConnectionManager(remote.exists)
        if manager.check_connection().status == ConnectionStatus.ONLINE:
            ...
    """

    def __init__(self, probe: Optional[Callable[[], bool]] = None):
        """
        Args:
            probe: Returns True when the remote store answers; None means
                local-only mode
        """
        self._probe = probe
        self._state = ConnectionState()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._lock = threading.Lock()
        self._last_reported = ConnectionStatus.UNKNOWN

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return self._state.status == ConnectionStatus.OFFLINE

    def check_connection(self) -> ConnectionState:
        """
        Run the probe and update state.

        Returns:
            Updated ConnectionState
        """
        with self._lock:
            self._state.status = ConnectionStatus.CHECKING
            self._state.last_check = datetime.now()

        if self._probe is None:
            self._set_offline("Remote store not configured")
            return self._state

        try:
            reachable = bool(self._probe())
        except Exception as e:
            logger.debug(f"Connection probe failed: {e}")
            reachable = False
            self._state.error_message = str(e)

        if reachable:
            self.mark_live()
        else:
            self._set_offline(self._state.error_message or "Remote store unreachable")
        return self._state

    def mark_live(self) -> None:
        """Record proof of connectivity (probe success or feed delivery)."""
        with self._lock:
            old_status = self._state.status
            self._state.status = ConnectionStatus.ONLINE
            self._state.last_online = datetime.now()
            self._state.consecutive_failures = 0
            self._state.error_message = None
        self._status_changed(old_status)

    def mark_offline(self, reason: Optional[str] = None) -> None:
        """Switch to local-only mode."""
        self._set_offline(reason or "Marked offline")

    def _set_offline(self, reason: str) -> None:
        with self._lock:
            old_status = self._state.status
            self._state.status = ConnectionStatus.OFFLINE
            self._state.consecutive_failures += 1
            self._state.error_message = reason
        self._status_changed(old_status)

    def _status_changed(self, old_status: ConnectionStatus) -> None:
        # CHECKING is transient and never reported
        if old_status == ConnectionStatus.CHECKING:
            old_status = self._last_reported
        if old_status != self._state.status:
            logger.info(f"Connection status changed: {old_status.value} -> {self._state.status.value}")
            self._notify_callbacks()
        self._last_reported = self._state.status

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """
        Register a callback for connection status changes.

        Args:
            callback: Function called with ConnectionState when status changes
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_online": self.is_online,
            "last_check": self._state.last_check.isoformat() if self._state.last_check else None,
            "last_online": self._state.last_online.isoformat() if self._state.last_online else None,
            "failures": self._state.consecutive_failures,
            "error": self._state.error_message,
        }
