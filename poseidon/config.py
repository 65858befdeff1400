"""
poseidon.config — parameter-set selection for the hash core.

Configuration precedence:
  1) Environment variables (POSEIDON_*)
  2) Hardcoded defaults below

Key env vars:
  - POSEIDON_PARAMS_NAME   (str)    default: "bn254_t3"
  - POSEIDON_PARAMS_JSON   (path)   default: unset (use the Grain-derived set)
  - POSEIDON_LOG_LEVEL     (str)    default: "WARNING"

Usage:
    from poseidon.config import load_config
    CFG = load_config()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_PARAMS_NAME = "bn254_t3"


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def _env_log_level(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class PoseidonConfig:
    params_name: str
    params_json: Optional[Path]
    log_level: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "params_name": self.params_name,
            "params_json": str(self.params_json) if self.params_json else None,
            "log_level": logging.getLevelName(self.log_level),
        }


@lru_cache(maxsize=1)
def load_config() -> PoseidonConfig:
    """Build and cache a PoseidonConfig from environment + defaults."""
    return PoseidonConfig(
        params_name=_env_str("POSEIDON_PARAMS_NAME", DEFAULT_PARAMS_NAME),
        params_json=_env_path("POSEIDON_PARAMS_JSON"),
        log_level=_env_log_level("POSEIDON_LOG_LEVEL", logging.WARNING),
    )


def configure_logging(level: Optional[int] = None) -> None:
    """Attach a basic handler to the core's loggers (CLI and scripts use this)."""
    if level is None:
        level = load_config().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in ("poseidon", "precompile", "accumulator"):
        logging.getLogger(name).setLevel(level)


__all__ = ["PoseidonConfig", "load_config", "configure_logging", "DEFAULT_PARAMS_NAME"]
