# =============================================================================
# camp_core/offline/local_cache.py
# Local JSON cache of the region tree
# =============================================================================
"""
LocalCache - synchronous single-key persistence of the region tree.

Used for instant startup rendering and as the write-through backup for every
save. The file holds the bare regions array, no wrapper metadata:

    local_data/
    └── cache/
        └── election-camp-data.json
"""

from __future__ import annotations
import json
import os
import tempfile
from pathlib import Path
from typing import Optional
import logging

from camp_core.models.entities import RegionTree, regions_from_payload, regions_to_payload

logger = logging.getLogger(__name__)


class LocalCache:
    """
    Read/write the cached tree as one JSON blob.

    Usage:
        cache = LocalCache(config.cache_dir)
        regions = cache.load()     # None when nothing is cached
        cache.save(regions)
    """

    STORAGE_KEY = "election-camp-data"

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.cache_dir / f"{self.STORAGE_KEY}.json"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[RegionTree]:
        """
        Load the cached tree.

        Returns:
            The cached tree, or None if nothing usable is cached
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return regions_from_payload(json.load(f))
        except (json.JSONDecodeError, ValueError, OSError) as e:
            logger.warning(f"Error reading local cache: {e}")
            return None

    def save(self, regions: RegionTree) -> bool:
        """
        Persist the tree, replacing the previous blob atomically.

        Returns:
            True if the blob was written
        """
        try:
            payload = regions_to_payload(regions)
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
            logger.debug(f"Local cache saved ({len(payload)} regions)")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving local cache: {e}")
            return False

    def clear(self) -> bool:
        try:
            if self.path.exists():
                self.path.unlink()
            return True
        except OSError as e:
            logger.error(f"Error clearing local cache: {e}")
            return False
