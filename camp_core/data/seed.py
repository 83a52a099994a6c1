# =============================================================================
# camp_core/data/seed.py
# Seed snapshot of the region tree
# =============================================================================
"""
SeedLoader - last-known-good region tree used whenever the remote document is
empty, unreachable or too slow.

When a seed URL is configured the snapshot is fetched with a plain HTTP GET,
otherwise the snapshot bundled with the package is read.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Optional
import logging

import requests

from camp_core.models.entities import RegionTree, regions_from_payload

logger = logging.getLogger(__name__)

BUNDLED_SEED_PATH = Path(__file__).parent / "regions.json"
SEED_PATH = "/regions.json"


class SeedLoader:
    """
    Load the seed tree; never raises.

    Usage:
        seed = SeedLoader(url=config.seed_url)
        regions = seed.load()
    """

    def __init__(
        self,
        url: Optional[str] = None,
        bundled_path: Path = BUNDLED_SEED_PATH,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = self._resolve_url(url) if url else None
        self.bundled_path = Path(bundled_path)
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def _resolve_url(url: str) -> str:
        # A bare origin gets the fixed seed path appended
        url = url.rstrip("/")
        return url if url.endswith(".json") else f"{url}{SEED_PATH}"

    def load(self) -> RegionTree:
        """
        Returns:
            The seed tree, or an empty tree if it cannot be loaded
        """
        try:
            if self.url:
                return self._fetch()
            return self._read_bundled()
        except (requests.exceptions.RequestException, OSError, ValueError) as e:
            logger.error(f"Error loading initial data: {e}")
            return ()

    def _fetch(self) -> RegionTree:
        response = self.session.get(self.url, timeout=self.timeout)
        response.raise_for_status()
        regions = regions_from_payload(response.json())
        logger.info(f"Seed data fetched from {self.url} ({len(regions)} regions)")
        return regions

    def _read_bundled(self) -> RegionTree:
        with open(self.bundled_path, "r", encoding="utf-8") as f:
            regions = regions_from_payload(json.load(f))
        logger.debug(f"Bundled seed data loaded ({len(regions)} regions)")
        return regions
