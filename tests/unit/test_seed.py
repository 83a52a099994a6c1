# =============================================================================
# tests/unit/test_seed.py
# Unit Tests for the seed loader
# =============================================================================

from unittest.mock import MagicMock

import requests

from camp_core.data.seed import SeedLoader
from camp_core.models.entities import UnionBearingRegion


class TestBundledSeed:
    """Test the snapshot shipped with the package"""

    def test_loads_both_region_shapes(self):
        regions = SeedLoader().load()

        assert regions[0].id == "region-satkania-pouroshova"
        assert not regions[0].has_unions
        assert any(isinstance(r, UnionBearingRegion) for r in regions)

    def test_seed_has_no_persons(self, seed_regions):
        for region in seed_regions:
            if isinstance(region, UnionBearingRegion):
                assert all(not u.union_responsible for u in region.unions)

    def test_missing_file_gives_empty_tree(self, tmp_path):
        assert SeedLoader(bundled_path=tmp_path / "missing.json").load() == ()


class TestRemoteSeed:
    """Test fetching the snapshot over HTTP"""

    def test_bare_origin_gets_seed_path(self):
        loader = SeedLoader(url="https://camp.example.org/")
        assert loader.url == "https://camp.example.org/regions.json"

    def test_full_url_kept(self):
        loader = SeedLoader(url="https://cdn.example.org/data/seed.json")
        assert loader.url == "https://cdn.example.org/data/seed.json"

    def test_fetch(self, sample_payload, sample_regions):
        session = MagicMock()
        session.get.return_value.json.return_value = sample_payload

        loader = SeedLoader(url="https://camp.example.org", session=session, timeout=3)

        assert loader.load() == sample_regions
        session.get.assert_called_once_with("https://camp.example.org/regions.json", timeout=3)

    def test_network_failure_gives_empty_tree(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("offline")

        assert SeedLoader(url="https://camp.example.org", session=session).load() == ()

    def test_http_error_gives_empty_tree(self):
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("404")

        assert SeedLoader(url="https://camp.example.org", session=session).load() == ()

    def test_bad_payload_gives_empty_tree(self):
        session = MagicMock()
        session.get.return_value.json.return_value = {"not": "a list"}

        assert SeedLoader(url="https://camp.example.org", session=session).load() == ()
