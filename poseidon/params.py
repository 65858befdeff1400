"""
Poseidon parameter sets and registry.

A parameter set fixes the permutation completely: width `t`, full/partial
round counts, S-box exponent, MDS matrix and round-constant table. The tables
are immutable tuples, shared by reference across all calls.

The default set, `bn254_t3`, is derived with the Grain LFSR procedure
(see poseidon.grain) for n=254, t=3, R_F=8, R_P=57, alpha=5 over the BN254
scalar field. It is built lazily on first use and cached.

Other sets can be registered at startup, e.g. to match a circuit's own
tables exactly:

    load_params_json("path/to/circuit_params.json", name="bn254_t3")

JSON schema
-----------
{
  "field": "bn254:fr",
  "alpha": 5,
  "t": 3,
  "R_F": 8,
  "R_P": 57,
  "mds": [[...t ints...], [...], [...]],
  "rc":  [[...t ints...], ... R_F+R_P rows ...]
}

Integers may be decimal strings, 0x-hex strings or JSON numbers; every entry
must already be a canonical residue.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from . import field
from .config import DEFAULT_PARAMS_NAME, load_config
from .grain import generate_parameters

log = logging.getLogger("poseidon.params")

Table = Tuple[Tuple[int, ...], ...]

FIELD_SIZE_BITS = 254
WIDTH = 3
FULL_ROUNDS = 8
PARTIAL_ROUNDS = 57
ALPHA = 5


@dataclass(frozen=True)
class PoseidonParams:
    t: int  # state width
    R_F: int  # number of full rounds
    R_P: int  # number of partial rounds
    alpha: int  # S-box exponent
    mds: Table  # t x t
    rc: Table  # (R_F + R_P) x t

    def validate(self) -> None:
        if self.t < 2:
            raise ValueError("t must be >= 2")
        if self.R_F % 2 != 0:
            raise ValueError("R_F must be even (split half-before/after partial rounds)")
        if self.alpha < 3 or self.alpha % 2 == 0:
            raise ValueError("alpha must be an odd integer >= 3")
        if len(self.mds) != self.t or any(len(row) != self.t for row in self.mds):
            raise ValueError("mds must be t x t")
        expected_rounds = self.R_F + self.R_P
        if len(self.rc) != expected_rounds or any(len(row) != self.t for row in self.rc):
            raise ValueError(f"rc must be (R_F+R_P) x t = {expected_rounds} x {self.t}")
        for row in (*self.mds, *self.rc):
            for v in row:
                if not field.is_canonical(v):
                    raise ValueError(f"parameter entry {v!r} is not a canonical field element")

    @property
    def rounds(self) -> int:
        return self.R_F + self.R_P

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "field": "bn254:fr",
            "alpha": self.alpha,
            "t": self.t,
            "R_F": self.R_F,
            "R_P": self.R_P,
            "mds": [[str(v) for v in row] for row in self.mds],
            "rc": [[str(v) for v in row] for row in self.rc],
        }


# Global registry keyed by a short name (e.g., "bn254_t3")
_PARAMS_REGISTRY: Dict[str, PoseidonParams] = {}
_REGISTRY_LOCK = threading.Lock()


def register_params(name: str, params: PoseidonParams) -> None:
    """
    Register a Poseidon parameter set under `name`.

    Call this at process startup with the exact params your circuits use.
    """
    if not name or not isinstance(name, str):
        raise ValueError("name must be a non-empty string")
    params.validate()
    with _REGISTRY_LOCK:
        _PARAMS_REGISTRY[name] = params
    log.info("registered Poseidon params %r (t=%d R_F=%d R_P=%d)", name, params.t, params.R_F, params.R_P)


def get_params(name: Optional[str] = None) -> PoseidonParams:
    """
    Look up a registered set; the configured default is built on first use.
    """
    cfg = load_config()
    name = name or cfg.params_name
    with _REGISTRY_LOCK:
        params = _PARAMS_REGISTRY.get(name)
    if params is not None:
        return params
    if name == cfg.params_name and cfg.params_json is not None:
        return load_params_json(cfg.params_json, name=name)
    if name == DEFAULT_PARAMS_NAME:
        params = bn254_t3_params()
        register_params(name, params)
        return params
    raise KeyError(
        f"Poseidon params '{name}' are not registered. "
        "Load them with load_params_json(...) or register_params(...)."
    )


def registered_names() -> Tuple[str, ...]:
    with _REGISTRY_LOCK:
        return tuple(sorted(_PARAMS_REGISTRY))


@lru_cache(maxsize=1)
def bn254_t3_params() -> PoseidonParams:
    """The Grain-derived BN254 t=3 parameter set (cached; immutable)."""
    rc, mds = generate_parameters(
        n=FIELD_SIZE_BITS, t=WIDTH, r_f=FULL_ROUNDS, r_p=PARTIAL_ROUNDS, modulus=field.P
    )
    params = PoseidonParams(t=WIDTH, R_F=FULL_ROUNDS, R_P=PARTIAL_ROUNDS, alpha=ALPHA, mds=mds, rc=rc)
    params.validate()
    return params


def _to_int(x: Union[int, str]) -> int:
    if isinstance(x, int):
        return field.validate(x)
    return field.parse_int(x)


def _table(rows: Sequence[Sequence[Union[int, str]]]) -> Table:
    return tuple(tuple(_to_int(v) for v in row) for row in rows)


def load_params_json(path: Union[str, Path], name: Optional[str] = None) -> PoseidonParams:
    """
    Load a Poseidon params JSON file and register it.

    If `name` is None, a name is derived from the filename (without extension).
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    params = PoseidonParams(
        t=int(raw["t"]),
        R_F=int(raw["R_F"]),
        R_P=int(raw["R_P"]),
        alpha=int(raw.get("alpha", ALPHA)),
        mds=_table(raw["mds"]),
        rc=_table(raw["rc"]),
    )
    params.validate()

    reg_name = name or os.path.splitext(os.path.basename(str(path)))[0]
    register_params(reg_name, params)
    return params


def dump_params_json(params: PoseidonParams, path: Union[str, Path]) -> Path:
    """Write `params` in the schema load_params_json() accepts."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(params.to_json_dict(), f, indent=2)
        f.write("\n")
    return out


__all__ = [
    "PoseidonParams",
    "register_params",
    "get_params",
    "registered_names",
    "bn254_t3_params",
    "load_params_json",
    "dump_params_json",
    "WIDTH",
    "FULL_ROUNDS",
    "PARTIAL_ROUNDS",
    "ALPHA",
]
