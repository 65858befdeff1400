"""
Hash facade: single-, pair- and n-ary Poseidon hashing.

The n-ary reduction is a strict left fold over compute_pair:

    hash_array([x])          = compute_single(x)
    hash_array([a, b, ...])  = compute_pair(...compute_pair(compute_pair(a, b), c)..., z)

The fold order is part of the contract. Two implementations only agree on
`hash_array` output if they reduce in the same left-to-right order.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from . import field
from .errors import EmptyArray
from .params import PoseidonParams, get_params
from .permutation import compute_pair, compute_single


def hash_single(x: int, *, params: Optional[PoseidonParams] = None) -> int:
    return compute_single(x, params)


def hash_pair(a: int, b: int, *, params: Optional[PoseidonParams] = None) -> int:
    return compute_pair(a, b, params)


def hash_array(xs: Sequence[int], *, params: Optional[PoseidonParams] = None) -> int:
    """
    Left-fold `xs` with compute_pair.

    Every element is validated before the first permutation runs, so a bad
    element late in the array fails without doing any hashing.
    """
    if len(xs) == 0:
        raise EmptyArray()
    values = field.validate_all(xs)
    p = params or get_params()
    if len(values) == 1:
        return compute_single(values[0], p)
    acc = compute_pair(values[0], values[1], p)
    for x in values[2:]:
        acc = compute_pair(acc, x, p)
    return acc


class PoseidonHasher:
    """
    Hash facade bound to one named parameter set.

    Resolves the parameters once so the dispatcher, the verifier and tree
    builds skip the registry lookup.
    """

    __slots__ = ("params_name", "params")

    def __init__(self, params_name: Optional[str] = None, *, params: Optional[PoseidonParams] = None):
        self.params = params or get_params(params_name)
        self.params_name = params_name

    def hash_single(self, x: int) -> int:
        return compute_single(x, self.params)

    def hash_pair(self, a: int, b: int) -> int:
        return compute_pair(a, b, self.params)

    def hash_array(self, xs: Sequence[int]) -> int:
        return hash_array(xs, params=self.params)

    def hash_many_pairs(self, pairs: Sequence[Sequence[int]]) -> List[int]:
        """Hash one tree level: [H(l0, r0), H(l1, r1), ...]."""
        return [compute_pair(a, b, self.params) for a, b in pairs]


__all__ = ["hash_single", "hash_pair", "hash_array", "PoseidonHasher"]
