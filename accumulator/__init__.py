"""
accumulator
===========

Root registry, nullifier registry and Poseidon membership-proof verification.

    from accumulator import ProofVerifier, PoseidonMerkleTree

    tree = PoseidonMerkleTree([11, 22, 33], depth=8)
    v = ProofVerifier()
    v.register_root(tree.root)
    v.verify(22, tree.proof(1), tree.root)              # True
    v.consume_proof(22, tree.proof(1), tree.root, 777)  # True, once
"""

from __future__ import annotations

from .errors import AccumulatorError, InvalidProof, NullifierAlreadyUsed
from .merkle import PoseidonMerkleTree
from .state import (AccumulatorState, MemoryAccumulatorState,
                    SQLiteAccumulatorState)
from .types import Direction, MerkleProof, PathElement, path_bits_fit
from .verifier import ProofVerifier

__all__ = [
    "AccumulatorError",
    "InvalidProof",
    "NullifierAlreadyUsed",
    "AccumulatorState",
    "MemoryAccumulatorState",
    "SQLiteAccumulatorState",
    "Direction",
    "PathElement",
    "MerkleProof",
    "path_bits_fit",
    "ProofVerifier",
    "PoseidonMerkleTree",
]
