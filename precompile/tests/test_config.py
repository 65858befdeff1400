import logging

import pytest

from poseidon import config as poseidon_config
from precompile import config as precompile_config


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    precompile_config.load_config.cache_clear()
    poseidon_config.load_config.cache_clear()
    yield
    precompile_config.load_config.cache_clear()
    poseidon_config.load_config.cache_clear()


def test_precompile_defaults(monkeypatch):
    for name in ("PRECOMPILE_MAX_CALLDATA_BYTES", "PRECOMPILE_MAX_ARRAY_LEN",
                 "PRECOMPILE_MAX_TREE_DEPTH", "PRECOMPILE_METRICS"):
        monkeypatch.delenv(name, raising=False)
    cfg = precompile_config.load_config()
    assert cfg == precompile_config.PrecompileConfig()
    assert cfg.as_dict()["max_tree_depth"] == 32


def test_precompile_env_overrides_and_clamps(monkeypatch):
    monkeypatch.setenv("PRECOMPILE_MAX_ARRAY_LEN", "0x10")
    monkeypatch.setenv("PRECOMPILE_MAX_TREE_DEPTH", "100000")
    monkeypatch.setenv("PRECOMPILE_MAX_CALLDATA_BYTES", "not-a-number")
    monkeypatch.setenv("PRECOMPILE_METRICS", "off")
    cfg = precompile_config.load_config()
    assert cfg.max_array_len == 16
    assert cfg.max_tree_depth == 256
    assert cfg.max_calldata_bytes == 1_048_576
    assert cfg.metrics_enabled is False


def test_load_config_is_cached(monkeypatch):
    a = precompile_config.load_config()
    monkeypatch.setenv("PRECOMPILE_MAX_ARRAY_LEN", "7")
    assert precompile_config.load_config() is a


def test_poseidon_config(monkeypatch, tmp_path):
    monkeypatch.setenv("POSEIDON_PARAMS_NAME", "custom")
    monkeypatch.setenv("POSEIDON_PARAMS_JSON", str(tmp_path / "p.json"))
    monkeypatch.setenv("POSEIDON_LOG_LEVEL", "debug")
    cfg = poseidon_config.load_config()
    assert cfg.params_name == "custom"
    assert cfg.params_json == (tmp_path / "p.json").resolve()
    assert cfg.log_level == logging.DEBUG
    assert cfg.as_dict()["log_level"] == "DEBUG"


def test_poseidon_config_defaults(monkeypatch):
    for name in ("POSEIDON_PARAMS_NAME", "POSEIDON_PARAMS_JSON", "POSEIDON_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    cfg = poseidon_config.load_config()
    assert cfg.params_name == poseidon_config.DEFAULT_PARAMS_NAME == "bn254_t3"
    assert cfg.params_json is None
    assert cfg.log_level == logging.WARNING
