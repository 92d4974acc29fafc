"""Configuration loading: file < environment < explicit overrides."""

import json

import pytest

from lingua_relay.config import RelayConfig, load_config
from lingua_relay.errors import RelayError


def test_defaults_without_file_or_env(tmp_path):
    cfg = load_config(tmp_path / "missing.json", env={})
    assert cfg == RelayConfig()
    assert cfg.port == 3000
    assert cfg.store == "memory"


def test_file_then_env_then_overrides(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"port": 4000, "log_level": "DEBUG", "host": "127.0.0.1"}))

    cfg = load_config(path, env={"RELAY_PORT": "5000", "SUPABASE_URL": "https://p.supabase.co"}, host=None, log_level="WARNING")
    assert cfg.port == 5000
    assert cfg.host == "127.0.0.1"
    assert cfg.log_level == "WARNING"
    assert cfg.supabase_url == "https://p.supabase.co"


def test_cors_origins_list_from_env(tmp_path):
    cfg = load_config(tmp_path / "none.json", env={"RELAY_CORS_ORIGINS": "https://a.io, https://b.io"})
    assert cfg.cors_origins == ["https://a.io", "https://b.io"]


def test_broken_file_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_config(path, env={}).port == 3000


def test_invalid_value_is_config_error(tmp_path):
    with pytest.raises(RelayError) as exc:
        load_config(tmp_path / "none.json", env={"RELAY_STORE": "redis"})
    assert exc.value.code == "config_error"


def test_supabase_requires_credentials():
    with pytest.raises(RelayError):
        RelayConfig(store="supabase").require_supabase()
    assert RelayConfig(supabase_url="u", supabase_key="k").require_supabase() == ("u", "k")
