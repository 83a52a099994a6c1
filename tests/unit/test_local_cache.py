# =============================================================================
# tests/unit/test_local_cache.py
# Unit Tests for the local JSON cache
# =============================================================================

import json

from camp_core.offline.local_cache import LocalCache


class TestLocalCache:
    """Test load/save/clear of the cached tree"""

    def test_empty_cache_loads_none(self, tmp_path):
        cache = LocalCache(tmp_path / "cache")
        assert not cache.exists()
        assert cache.load() is None

    def test_save_then_load(self, tmp_path, sample_regions):
        cache = LocalCache(tmp_path)
        assert cache.save(sample_regions)
        assert cache.load() == sample_regions

    def test_file_holds_bare_regions_array(self, tmp_path, sample_payload, sample_regions):
        cache = LocalCache(tmp_path)
        cache.save(sample_regions)

        with open(cache.path, encoding="utf-8") as f:
            assert json.load(f) == sample_payload
        assert cache.path.name == "election-camp-data.json"

    def test_bangla_text_written_unescaped(self, tmp_path, sample_regions):
        cache = LocalCache(tmp_path)
        cache.save(sample_regions)
        assert "সাতকানিয়া" in cache.path.read_text(encoding="utf-8")

    def test_corrupt_file_loads_none(self, tmp_path):
        cache = LocalCache(tmp_path)
        cache.path.write_text("{not json", encoding="utf-8")
        assert cache.load() is None

    def test_wrong_shape_loads_none(self, tmp_path):
        cache = LocalCache(tmp_path)
        cache.path.write_text('{"regions": []}', encoding="utf-8")
        assert cache.load() is None

    def test_save_replaces_previous(self, tmp_path, sample_regions):
        cache = LocalCache(tmp_path)
        cache.save(sample_regions)
        cache.save(sample_regions[:1])
        assert cache.load() == sample_regions[:1]
        assert not list(tmp_path.glob("*.tmp"))

    def test_clear(self, tmp_path, sample_regions):
        cache = LocalCache(tmp_path)
        cache.save(sample_regions)
        assert cache.clear()
        assert cache.load() is None
        # Clearing twice is fine
        assert cache.clear()
