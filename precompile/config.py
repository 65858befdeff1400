"""
precompile.config — numeric caps and feature flags for the call dispatcher.

Configuration precedence:
  1) Environment variables (PRECOMPILE_*)
  2) Hardcoded safe defaults below

Key env vars:
  - PRECOMPILE_MAX_CALLDATA_BYTES  (int)   default: 1_048_576
  - PRECOMPILE_MAX_ARRAY_LEN       (int)   default: 4_096
  - PRECOMPILE_MAX_TREE_DEPTH      (int)   default: 32
  - PRECOMPILE_METRICS             (bool)  default: true

Out-of-range integers are clamped to [min, max]; unparsable values fall back
to the default.

Usage:
    from precompile.config import load_config
    CFG = load_config()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


@dataclass(frozen=True)
class PrecompileConfig:
    max_calldata_bytes: int = 1_048_576
    max_array_len: int = 4_096
    max_tree_depth: int = 32
    metrics_enabled: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_calldata_bytes": self.max_calldata_bytes,
            "max_array_len": self.max_array_len,
            "max_tree_depth": self.max_tree_depth,
            "metrics_enabled": self.metrics_enabled,
        }


@lru_cache(maxsize=1)
def load_config() -> PrecompileConfig:
    """Build and cache a PrecompileConfig from environment + safe defaults."""
    return PrecompileConfig(
        max_calldata_bytes=_env_int("PRECOMPILE_MAX_CALLDATA_BYTES", 1_048_576, min_v=4_096, max_v=67_108_864),
        max_array_len=_env_int("PRECOMPILE_MAX_ARRAY_LEN", 4_096, min_v=1, max_v=1_048_576),
        max_tree_depth=_env_int("PRECOMPILE_MAX_TREE_DEPTH", 32, min_v=1, max_v=256),
        metrics_enabled=_env_bool("PRECOMPILE_METRICS", True),
    )


__all__ = ["PrecompileConfig", "load_config"]
