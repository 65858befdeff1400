"""
poseidon.tests helpers

Small utilities shared by the poseidon/*, precompile/* and accumulator/*
tests. Importable without any fixtures present.

Exports:
- TEST_ROOT
- fixture_path(*parts) -> Path
- read_json(path_or_name) -> Any
- reference_permute(state, params) -> list[int]
- env_flag(name, default=False) -> bool
- configure_test_logging() -> None

Environment toggles:
- POSEIDON_TEST_LOG=1     → enable DEBUG logging for poseidon.*, precompile.*, accumulator.*
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Sequence, Union

TEST_ROOT: Path = Path(__file__).resolve().parent


def fixture_path(*parts: Union[str, Path]) -> Path:
    """Return a path under poseidon/tests/fixtures."""
    return (TEST_ROOT / "fixtures").joinpath(*map(Path, parts))


def read_json(path_or_name: Union[str, Path]) -> Any:
    """
    Read and parse JSON from a path. If a bare name is given, resolve under fixtures/.
    """
    p = Path(path_or_name)
    if not p.exists():
        p = fixture_path(str(p))
    if not p.exists():
        raise FileNotFoundError(f"JSON file not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def reference_permute(state: Sequence[int], params: Any) -> List[int]:
    """
    Textbook Poseidon permutation written out with builtin pow(); used to
    cross-check poseidon.permutation.
    """
    p = 21888242871839275222246405745257275088548364400416034343698204186575808495617
    t = params.t
    x = list(state)
    half = params.R_F // 2
    for r in range(params.R_F + params.R_P):
        x = [(x[i] + params.rc[r][i]) % p for i in range(t)]
        if r < half or r >= half + params.R_P:
            x = [pow(v, params.alpha, p) for v in x]
        else:
            x[0] = pow(x[0], params.alpha, p)
        x = [sum(params.mds[i][j] * x[j] for j in range(t)) % p for i in range(t)]
    return x


def env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def configure_test_logging(level: int | None = None) -> None:
    """Configure basic logging for the core's loggers when POSEIDON_TEST_LOG is set."""
    if level is None:
        level = logging.DEBUG
    if env_flag("POSEIDON_TEST_LOG", False):
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        for name in ("poseidon", "precompile", "accumulator"):
            logging.getLogger(name).setLevel(level)


configure_test_logging()

__all__ = [
    "TEST_ROOT",
    "fixture_path",
    "read_json",
    "reference_permute",
    "env_flag",
    "configure_test_logging",
]
