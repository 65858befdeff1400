"""
Poseidon permutation over the BN254 scalar field.

Round schedule (R_F = 8, R_P = 57 for the default set):
  - First R_F/2 full rounds    (constants, S-box on all t elements, MDS)
  - R_P partial rounds         (constants, S-box on element 0 only, MDS)
  - Last  R_F/2 full rounds

The permutation is purely functional: every call builds a fresh state list and
nothing is carried over between calls, so independent callers always
reproduce the same outputs offline.

Entry points used by the hash facade:
  - compute_single(x):   state = (x, 0, 0) -> permute -> state[0]
  - compute_pair(a, b):  state = (a, b, 0) -> permute -> state[0]
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from . import field
from .params import PoseidonParams, get_params


def _sbox(x: int, alpha: int) -> int:
    if alpha == 5:
        return field.pow5(x)
    return pow(x, alpha, field.P)


def _apply_mds(state: List[int], mds: Sequence[Sequence[int]]) -> List[int]:
    t = len(state)
    out = [0] * t
    for i in range(t):
        acc = 0
        row = mds[i]
        for j in range(t):
            acc += row[j] * state[j]
        out[i] = acc % field.P
    return out


def _add_constants(state: List[int], constants: Sequence[int]) -> List[int]:
    return [field.add(x, c) for x, c in zip(state, constants)]


def permute(state: Sequence[int], params: PoseidonParams) -> List[int]:
    """
    Apply the full permutation to `state` and return a new list.

    `state` must hold exactly t canonical field elements.
    """
    t, alpha, mds, rc = params.t, params.alpha, params.mds, params.rc
    if len(state) != t:
        raise ValueError(f"state length {len(state)} != t={t}")

    x = field.validate_all(state)
    half = params.R_F // 2
    r = 0

    for _ in range(half):
        x = _add_constants(x, rc[r])
        x = [_sbox(v, alpha) for v in x]
        x = _apply_mds(x, mds)
        r += 1

    for _ in range(params.R_P):
        x = _add_constants(x, rc[r])
        x[0] = _sbox(x[0], alpha)
        x = _apply_mds(x, mds)
        r += 1

    for _ in range(half):
        x = _add_constants(x, rc[r])
        x = [_sbox(v, alpha) for v in x]
        x = _apply_mds(x, mds)
        r += 1

    assert r == params.rounds, "round counter mismatch"
    return x


def _initial_state(inputs: Sequence[int], t: int) -> List[int]:
    if len(inputs) > t - 1:
        raise ValueError(f"at most {t - 1} inputs fit a width-{t} state, got {len(inputs)}")
    return list(inputs) + [0] * (t - len(inputs))


def compute_single(x: int, params: Optional[PoseidonParams] = None) -> int:
    field.validate(x)
    p = params or get_params()
    return permute(_initial_state([x], p.t), p)[0]


def compute_pair(a: int, b: int, params: Optional[PoseidonParams] = None) -> int:
    field.validate(a)
    field.validate(b)
    p = params or get_params()
    return permute(_initial_state([a, b], p.t), p)[0]


__all__ = ["permute", "compute_single", "compute_pair"]
