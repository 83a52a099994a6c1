# =============================================================================
# camp_core/data/remote_store.py
# Remote Document Store Adapter (Supabase)
# =============================================================================
"""
RemoteDocumentStore - the whole region forest as one remote document.

The document is a single row of the ``election_camp_data`` table:

    id            text primary key      -- 'regions-data'
    regions       jsonb                 -- Region[]
    last_updated  timestamptz
    version       text                  -- '1.0'

Public operations degrade instead of raising: reads fall back to the seed
snapshot, writes report success as a boolean, the connectivity probe answers
False. Only ``fetch`` (used internally and by the change feed) raises the
typed remote errors.
"""

from __future__ import annotations
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union
import logging

from postgrest.exceptions import APIError

from camp_core.config import (
    DEFAULT_DOCUMENT_ID,
    DEFAULT_TABLE,
    DOCUMENT_VERSION,
    POLL_INTERVAL,
    READ_CACHE_TTL,
    READ_TIMEOUT,
)
from camp_core.data.seed import SeedLoader
from camp_core.errors.exceptions import (
    CampError,
    ConfigurationError,
    DocumentNotFoundError,
    PermissionDeniedError,
    RemoteStoreError,
    RemoteTimeoutError,
)
from camp_core.models.entities import RegionTree, regions_from_payload, regions_to_payload

logger = logging.getLogger(__name__)

# Postgres insufficient_privilege, raised for row-level security violations too
PERMISSION_DENIED_CODES = {"42501"}


class _Undefined:
    """Marker for a value the remote store must never receive."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def strip_undefined(value: Any) -> Any:
    """
    Recursively drop UNDEFINED entries before transmission.

    Sequences lose such elements entirely, mappings omit such keys; None is a
    real value and is preserved.
    """
    if isinstance(value, (list, tuple)):
        return [strip_undefined(item) for item in value if item is not UNDEFINED]
    if isinstance(value, dict):
        return {
            key: strip_undefined(item)
            for key, item in value.items()
            if item is not UNDEFINED
        }
    return value


@dataclass(frozen=True)
class RemoteSnapshot:
    """Tree delivered by the change feed."""
    regions: RegionTree
    updated_at: Optional[str] = None
    fallback: bool = False          # True when the feed failed and this is seed data


SnapshotCallback = Callable[[RemoteSnapshot], None]


class RemoteDocumentStore:
    """
    Adapter over the single remote document.

    Usage:
        store = RemoteDocumentStore(client, SeedLoader())
        regions = store.read()
        store.write(regions)
        subscription = store.subscribe(on_snapshot)
        ...
        subscription.unsubscribe()
    """

    def __init__(
        self,
        client,
        seed_loader: Optional[SeedLoader] = None,
        table: str = DEFAULT_TABLE,
        document_id: str = DEFAULT_DOCUMENT_ID,
        read_timeout: float = READ_TIMEOUT,
        cache_ttl: float = READ_CACHE_TTL,
        poll_interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            client: Supabase client, or None when Supabase is not configured
            seed_loader: Source of the fallback tree
            read_timeout: Seconds a read may take before it counts as timed out
            cache_ttl: Seconds a successful read is served from memory
            poll_interval: Seconds between change-feed polls
            clock: Wall-clock source (seconds)
        """
        self.client = client
        self.seed_loader = seed_loader or SeedLoader()
        self.table = table
        self.document_id = document_id
        self.read_timeout = read_timeout
        self.cache_ttl = cache_ttl
        self.poll_interval = poll_interval
        self._clock = clock

        self._cache: Optional[Tuple[RegionTree, float]] = None
        self._cache_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="RemoteStore")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    # =========================================================================
    # READ CACHE
    # =========================================================================

    def _cached(self) -> Optional[RegionTree]:
        with self._cache_lock:
            if self._cache is None:
                return None
            regions, stored_at = self._cache
            if self._clock() - stored_at < self.cache_ttl:
                return regions
            return None

    def _remember(self, regions: RegionTree) -> None:
        with self._cache_lock:
            self._cache = (regions, self._clock())

    def invalidate_cache(self) -> None:
        with self._cache_lock:
            self._cache = None

    # =========================================================================
    # LOW-LEVEL OPERATIONS (raise typed errors)
    # =========================================================================

    def _translate(self, error: Exception, operation: str) -> CampError:
        """Map a client exception onto the remote error taxonomy."""
        if isinstance(error, CampError):
            return error

        if isinstance(error, APIError):
            message = error.message or str(error)
            if error.code in PERMISSION_DENIED_CODES or "permission denied" in message.lower():
                return PermissionDeniedError(message, policy_code=error.code, recoverable=False)
            return RemoteStoreError(
                message,
                operation=operation,
                details={"api_code": error.code},
                recoverable=False,
            )

        # Transport failures (DNS, refused connection, dropped socket) are transient
        return RemoteStoreError(str(error), operation=operation, recoverable=True)

    def _require_client(self, operation: str) -> None:
        if self.client is None:
            raise ConfigurationError(
                f"Supabase is not configured; cannot {operation}",
                config_key="supabase",
            )

    def _select_document(self) -> Dict[str, Any]:
        response = (
            self.client.table(self.table)
            .select("*")
            .eq("id", self.document_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows:
            raise DocumentNotFoundError(
                "Remote document not found",
                table=self.table,
                document_id=self.document_id,
            )
        return rows[0]

    def fetch(self) -> Dict[str, Any]:
        """
        Fetch the raw document row, racing the request against the read timeout.

        Raises:
            RemoteTimeoutError: No answer within ``read_timeout``
            DocumentNotFoundError: The document does not exist
            PermissionDeniedError / RemoteStoreError: Any other failure
            ConfigurationError: No client configured
        """
        self._require_client("read")
        future = self._executor.submit(self._select_document)
        try:
            return future.result(timeout=self.read_timeout)
        except FuturesTimeoutError:
            # The request keeps running; its result is simply not observed
            raise RemoteTimeoutError("Remote read timed out", timeout=self.read_timeout)
        except Exception as e:
            raise self._translate(e, "read") from e

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _update(self, payload: List[Dict[str, Any]]) -> None:
        try:
            response = (
                self.client.table(self.table)
                .update({"regions": payload, "last_updated": self._timestamp()})
                .eq("id", self.document_id)
                .execute()
            )
        except Exception as e:
            raise self._translate(e, "update") from e

        if not response.data:
            raise DocumentNotFoundError(
                "No remote document to update",
                table=self.table,
                document_id=self.document_id,
            )

    def _create(self, payload: List[Dict[str, Any]]) -> None:
        try:
            (
                self.client.table(self.table)
                .upsert({
                    "id": self.document_id,
                    "regions": payload,
                    "last_updated": self._timestamp(),
                    "version": DOCUMENT_VERSION,
                })
                .execute()
            )
        except Exception as e:
            raise self._translate(e, "create") from e

    # =========================================================================
    # PUBLIC OPERATIONS (degrade, never raise)
    # =========================================================================

    def read(self, use_cache: bool = True) -> RegionTree:
        """
        Read the tree.

        Args:
            use_cache: Serve a read younger than ``cache_ttl`` from memory

        Returns:
            Remote tree; the seed tree when the document is missing, the read
            times out, or the store fails
        """
        if use_cache:
            cached = self._cached()
            if cached is not None:
                logger.debug("Returning cached remote data")
                return cached

        try:
            row = self.fetch()
            regions = regions_from_payload(row.get("regions") or [])
            self._remember(regions)
            logger.info(f"Remote data loaded and cached ({len(regions)} regions)")
            return regions
        except DocumentNotFoundError:
            logger.info("No remote document found, initializing in background...")
            return self._initialize_in_background()
        except RemoteTimeoutError:
            logger.warning("Remote read timed out, using seed data")
        except (CampError, ValueError) as e:
            logger.error(f"Error loading remote data, using seed data: {e}")

        return self.seed_loader.load()

    def _initialize_in_background(self) -> RegionTree:
        seed = self.seed_loader.load()
        payload = regions_to_payload(seed)

        def _done(future):
            error = future.exception()
            if error is not None:
                logger.error(f"Background remote initialization failed: {error}")
            else:
                logger.info("Remote document initialized in background")

        self._executor.submit(self._create, payload).add_done_callback(_done)
        return seed

    def initialize(self) -> RegionTree:
        """
        Return the remote tree, creating the document from the seed if missing.

        Falls back to the seed tree on any failure.
        """
        try:
            row = self.fetch()
            return regions_from_payload(row.get("regions") or [])
        except DocumentNotFoundError:
            logger.info("Initializing remote document with seed data...")
            seed = self.seed_loader.load()
            try:
                self._create(regions_to_payload(seed))
                logger.info("Remote document initialized with seed data")
            except CampError as e:
                logger.error(f"Error initializing remote document: {e}")
            return seed
        except (CampError, ValueError) as e:
            logger.error(f"Error initializing remote data, falling back to seed: {e}")
            return self.seed_loader.load()

    def write(self, regions: Union[RegionTree, Sequence[Dict[str, Any]]]) -> bool:
        """
        Upsert the tree: partial update first, full create when the document is
        missing or the update is refused.

        Args:
            regions: Tree of entities, or an already-encoded regions array

        Returns:
            True if the remote document now holds the tree
        """
        if self.client is None:
            logger.debug("Remote store not configured, skipping remote write")
            return False

        payload = strip_undefined(self._encode(regions))
        logger.debug(f"Starting remote save ({len(payload)} regions)")

        try:
            self._update(payload)
        except (DocumentNotFoundError, PermissionDeniedError) as e:
            logger.info(f"Update failed ({e.code}), trying to create document...")
            try:
                self._create(payload)
            except CampError as create_error:
                logger.error(f"Error creating remote document: {create_error}")
                return False
        except CampError as e:
            logger.error(f"Error saving remote document: {e}")
            return False

        try:
            self._remember(regions_from_payload(payload))
        except ValueError as e:
            logger.warning(f"Saved payload could not be cached: {e}")
            self.invalidate_cache()

        logger.info("Data saved to remote store and cache updated")
        return True

    @staticmethod
    def _encode(regions) -> List[Dict[str, Any]]:
        items = list(regions)
        if items and isinstance(items[0], dict):
            return items
        return regions_to_payload(items)

    def reset(self) -> RegionTree:
        """Overwrite the remote document with the seed; returns the seed either way."""
        seed = self.seed_loader.load()
        if self.write(seed):
            logger.info("Remote data reset to initial state")
        else:
            logger.error("Error resetting remote data, keeping seed locally")
        return seed

    def clear(self) -> bool:
        """Empty the regions of the remote document."""
        if self.write([]):
            logger.info("Remote data cleared successfully")
            return True
        return False

    def exists(self) -> bool:
        """Connectivity probe; any failure means "not connected"."""
        if self.client is None:
            return False
        try:
            self.fetch()
            return True
        except DocumentNotFoundError:
            # Reachable, the document just has not been created yet
            return True
        except Exception as e:
            logger.debug(f"Remote connection check failed: {e}")
            return False

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """
        Start the change feed.

        ``callback`` receives a RemoteSnapshot for every new version of the
        document, own writes included. If the feed fails it stops, and the
        callback gets the seed tree exactly once (``fallback=True``).

        Returns:
            Subscription handle; calling it detaches the feed
        """
        subscription = Subscription(self, callback, self.poll_interval)
        subscription.start()
        logger.info("Real-time data subscription started")
        return subscription

    def close(self) -> None:
        self._executor.shutdown(wait=False)


_MISSING = object()


class Subscription:
    """
    Polling change feed over the remote document.

    A new ``last_updated`` value is a change; the first successful poll always
    delivers. Timeouts and transport failures are retried on the next tick,
    anything else ends the feed with a one-shot seed delivery.
    """

    def __init__(self, store: RemoteDocumentStore, callback: SnapshotCallback, poll_interval: float):
        self._store = store
        self._callback = callback
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._lock = threading.RLock()
        self._active = True
        self._last_seen: Any = object()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="RemoteDocumentWatcher",
        )

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._thread.start()

    def unsubscribe(self) -> None:
        """Detach; no callback runs once this returns."""
        with self._lock:
            self._active = False
        self._stop.set()
        logger.debug("Real-time data subscription stopped")

    __call__ = unsubscribe

    def _deliver(self, snapshot: RemoteSnapshot) -> None:
        with self._lock:
            if not self._active:
                return
            try:
                self._callback(snapshot)
            except Exception as e:
                logger.error(f"Error in subscription callback: {e}", exc_info=True)

    def poll_once(self) -> bool:
        """
        One tick of the feed.

        Returns:
            False once the feed has failed and delivered its fallback
        """
        try:
            row = self._store.fetch()
            marker = row.get("last_updated")
            if marker != self._last_seen:
                regions = regions_from_payload(row.get("regions") or [])
                self._last_seen = marker
                logger.debug("Real-time update received from remote store")
                self._deliver(RemoteSnapshot(regions=regions, updated_at=marker))
            return True

        except DocumentNotFoundError:
            if self._last_seen is not _MISSING:
                self._last_seen = _MISSING
                logger.info("No remote document found, initializing...")
                self._deliver(RemoteSnapshot(regions=self._store.initialize()))
            return True

        except CampError as e:
            if e.recoverable:
                logger.warning(f"Subscription poll failed, retrying: {e}")
                return True
            self._fail(e)
            return False

        except ValueError as e:
            self._fail(e)
            return False

    def _fail(self, error: Exception) -> None:
        logger.error(f"Error in remote subscription: {error}")
        if not self._active:
            return
        # Seed may come over HTTP; keep it outside the lock unsubscribe() needs
        fallback = self._store.seed_loader.load()
        with self._lock:
            if not self._active:
                return
            self._deliver(RemoteSnapshot(regions=fallback, fallback=True))
            self._active = False

    def _run(self) -> None:
        while not self._stop.is_set():
            if not self.poll_once():
                break
            if self._stop.wait(timeout=self._poll_interval):
                break
