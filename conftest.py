import os

import pytest


def pytest_configure(config):
    # Register markers used across the repo without requiring external plugins.
    config.addinivalue_line(
        "markers", "slow: regenerates parameter tables or races threads; skipped with POSEIDON_SKIP_SLOW=1"
    )


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config, items):
    """
    Skip @pytest.mark.slow tests when POSEIDON_SKIP_SLOW is set.

    Pure-Python parameter generation and the SQLite race tests take a few
    seconds each; quick local loops can opt out of them.
    """
    if os.getenv("POSEIDON_SKIP_SLOW", "").strip().lower() not in ("1", "true", "yes", "on"):
        return
    skip = pytest.mark.skip(reason="slow test skipped (POSEIDON_SKIP_SLOW=1)")
    for item in items:
        if item.get_closest_marker("slow") is not None:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _isolate_precompile_env(monkeypatch):
    """Keep developer PRECOMPILE_* overrides from leaking into dispatcher defaults."""
    from precompile.config import load_config

    for name in ("PRECOMPILE_MAX_CALLDATA_BYTES", "PRECOMPILE_MAX_ARRAY_LEN",
                 "PRECOMPILE_MAX_TREE_DEPTH", "PRECOMPILE_METRICS"):
        monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()
