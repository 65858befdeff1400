"""
Membership-proof verification against registered roots, with single-use
nullifiers.

Per call:

    LeafPresented -> RecomputeCandidate -> {RootMatched, RootMismatched}

and for consume_proof, once matched:

    -> NullifierCheck -> {Consumed, Rejected}

`verify` is a predicate: a mismatching or unregistered root yields False.
`consume_proof` turns both failure modes into errors and runs its
check-then-insert sequence inside one state transaction. The check order is
fixed: nullifier freshness first, then proof validity. The nullifier is
inserted only after both pass, so no failure branch changes state.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from poseidon import field
from poseidon.errors import ArrayLengthMismatch
from poseidon.hash import PoseidonHasher

from .errors import InvalidProof, NullifierAlreadyUsed
from .state import AccumulatorState, MemoryAccumulatorState
from .types import Direction, MerkleProof

log = logging.getLogger("accumulator.verifier")


class ProofVerifier:
    def __init__(
        self,
        state: Optional[AccumulatorState] = None,
        *,
        hasher: Optional[PoseidonHasher] = None,
    ) -> None:
        self.state: AccumulatorState = state if state is not None else MemoryAccumulatorState()
        self.hasher = hasher or PoseidonHasher()

    # ------------------------------------------------------------------ roots

    def register_root(self, root: int) -> bool:
        """Insert `root` into the RootSet. Returns False if it was already registered."""
        field.validate(root)
        added = self.state.add_root(root)
        if added:
            log.debug("registered root %#x", root)
        return added

    def is_known_root(self, root: int) -> bool:
        return self.state.has_root(field.validate(root))

    def is_spent(self, nullifier: int) -> bool:
        return self.state.has_nullifier(field.validate(nullifier))

    # ----------------------------------------------------------- verification

    def compute_root(self, leaf: int, proof: MerkleProof) -> int:
        """Fold the sibling path over `leaf`, strictly in path order."""
        candidate = field.validate(leaf)
        for element in proof:
            if element.direction is Direction.LEFT:
                candidate = self.hasher.hash_pair(candidate, element.sibling)
            else:
                candidate = self.hasher.hash_pair(element.sibling, candidate)
        return candidate

    def verify(self, leaf: int, proof: MerkleProof, root: int) -> bool:
        field.validate(root)
        candidate = self.compute_root(leaf, proof)
        return candidate == root and self.state.has_root(root)

    def batch_verify(self, leaves: Sequence[int], proofs: Sequence[MerkleProof], root: int) -> List[bool]:
        if len(leaves) != len(proofs):
            raise ArrayLengthMismatch(len(leaves), len(proofs), what="leaves/proofs")
        return [self.verify(leaf, proof, root) for leaf, proof in zip(leaves, proofs)]

    # ------------------------------------------------------------ consumption

    def consume_proof(self, leaf: int, proof: MerkleProof, root: int, nullifier: int) -> bool:
        field.validate(leaf)
        field.validate(root)
        field.validate(nullifier)
        proof.validate()

        with self.state.transaction():
            if self.state.has_nullifier(nullifier):
                raise NullifierAlreadyUsed(nullifier)
            candidate = self.compute_root(leaf, proof)
            if candidate != root:
                raise InvalidProof(root=root, reason="root mismatch")
            if not self.state.has_root(root):
                raise InvalidProof(root=root, reason="unknown root")
            self.state.add_nullifier(nullifier)

        log.debug("consumed nullifier %#x against root %#x", nullifier, root)
        return True


__all__ = ["ProofVerifier"]
