# =============================================================================
# tests/unit/test_config.py
# Unit Tests for configuration loading
# =============================================================================

from pathlib import Path

import pytest

from camp_core import config as config_module
from camp_core.config import DEFAULT_DOCUMENT_ID, DEFAULT_TABLE, load_config

ENV_KEYS = ["SUPABASE_URL", "SUPABASE_KEY", "CAMP_TABLE", "CAMP_SEED_URL", "CAMP_CACHE_DIR", "CAMP_PDF_FONT"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "_read_secrets", lambda: {})


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.table == DEFAULT_TABLE
        assert config.document_id == DEFAULT_DOCUMENT_ID
        assert not config.has_supabase
        assert config.save_debounce == 1.0
        assert config.echo_window == 3.0

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "anon")
        monkeypatch.setenv("CAMP_CACHE_DIR", str(tmp_path))

        config = load_config()

        assert config.has_supabase
        assert config.cache_dir == Path(tmp_path)

    def test_secrets_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("CAMP_TABLE", "from_env")
        monkeypatch.setattr(config_module, "_read_secrets", lambda: {"table": "from_secrets"})
        assert load_config().table == "from_secrets"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("CAMP_TABLE", "from_env")
        assert load_config({"table": "explicit"}).table == "explicit"
