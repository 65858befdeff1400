"""
poseidon
========

Poseidon hash (t=3, R_F=8, R_P=57, x^5) over the BN254 scalar field.

Public surface:
  - field arithmetic:   poseidon.field (P, add, mul, pow5, validate, ...)
  - permutation:        permute, compute_single, compute_pair
  - hash facade:        hash_single, hash_pair, hash_array, PoseidonHasher
  - parameters:         PoseidonParams, get_params, register_params,
                        load_params_json, dump_params_json
  - errors:             PoseidonError, FieldElementTooLarge, EmptyArray,
                        ArrayLengthMismatch

Usage
-----
>>> from poseidon import hash_pair, hash_array
>>> hash_array([1, 2, 3]) == hash_pair(hash_pair(1, 2), 3)
True
"""

from __future__ import annotations

from .errors import (ArrayLengthMismatch, EmptyArray, ErrorCode,
                     FieldElementTooLarge, PoseidonError)
from .field import P
from .hash import PoseidonHasher, hash_array, hash_pair, hash_single
from .params import (PoseidonParams, dump_params_json, get_params,
                     load_params_json, register_params)
from .permutation import compute_pair, compute_single, permute
from .version import __version__

__all__ = [
    "__version__",
    "P",
    "ErrorCode",
    "PoseidonError",
    "FieldElementTooLarge",
    "EmptyArray",
    "ArrayLengthMismatch",
    "PoseidonParams",
    "get_params",
    "register_params",
    "load_params_json",
    "dump_params_json",
    "permute",
    "compute_single",
    "compute_pair",
    "hash_single",
    "hash_pair",
    "hash_array",
    "PoseidonHasher",
]
