"""
Fixed-depth Poseidon Merkle trees (dev / test / CLI helper).

Builds the tree a ProofVerifier checks against: internal nodes are
H(left, right) with the Poseidon pair hash, leaves are field elements placed
left to right, and unused positions hold `zero_leaf`. Empty subtrees are
represented by precomputed zero hashes, so a depth-32 tree with a handful of
leaves only materializes the occupied nodes.

API
---
    tree = PoseidonMerkleTree([l0, l1, l2], depth=4)
    tree.root                  -> int
    tree.proof(1)              -> MerkleProof (Direction per level, leaf -> root)
    tree.append(l3)            -> index of the new leaf
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from poseidon import field
from poseidon.hash import PoseidonHasher

from .types import Direction, MerkleProof, PathElement

MAX_DEPTH = 64


class PoseidonMerkleTree:
    def __init__(
        self,
        leaves: Iterable[int] = (),
        *,
        depth: int,
        zero_leaf: int = 0,
        hasher: Optional[PoseidonHasher] = None,
    ) -> None:
        if depth < 1 or depth > MAX_DEPTH:
            raise ValueError(f"depth must be in 1..{MAX_DEPTH}")
        self.depth = depth
        self.hasher = hasher or PoseidonHasher()
        self.zero_leaf = field.validate(zero_leaf)
        self._zeros = self._zero_hashes()
        self._levels: List[List[int]] = [[] for _ in range(depth + 1)]
        for leaf in leaves:
            self._levels[0].append(field.validate(leaf))
        if len(self._levels[0]) > self.capacity:
            raise ValueError(f"{len(self._levels[0])} leaves exceed capacity {self.capacity}")
        self._rebuild()

    @property
    def capacity(self) -> int:
        return 1 << self.depth

    @property
    def leaves(self) -> Sequence[int]:
        return tuple(self._levels[0])

    @property
    def root(self) -> int:
        top = self._levels[self.depth]
        return top[0] if top else self._zeros[self.depth]

    def _zero_hashes(self) -> List[int]:
        zeros = [self.zero_leaf]
        for _ in range(self.depth):
            zeros.append(self.hasher.hash_pair(zeros[-1], zeros[-1]))
        return zeros

    def _node(self, level: int, index: int) -> int:
        nodes = self._levels[level]
        return nodes[index] if index < len(nodes) else self._zeros[level]

    def _rebuild(self) -> None:
        for level in range(self.depth):
            below = self._levels[level]
            width = (len(below) + 1) // 2
            self._levels[level + 1] = self.hasher.hash_many_pairs(
                [(self._node(level, 2 * i), self._node(level, 2 * i + 1)) for i in range(width)]
            )

    def append(self, leaf: int) -> int:
        """Append a leaf and update the path above it. Returns its index."""
        index = len(self._levels[0])
        if index >= self.capacity:
            raise ValueError("tree is full")
        self._levels[0].append(field.validate(leaf))
        pos = index
        for level in range(self.depth):
            parent = pos // 2
            value = self.hasher.hash_pair(self._node(level, 2 * parent), self._node(level, 2 * parent + 1))
            above = self._levels[level + 1]
            if parent < len(above):
                above[parent] = value
            else:
                above.append(value)
            pos = parent
        return index

    def proof(self, index: int) -> MerkleProof:
        if index < 0 or index >= len(self._levels[0]):
            raise IndexError(f"leaf index {index} out of range")
        path: List[PathElement] = []
        pos = index
        for level in range(self.depth):
            if pos & 1:
                path.append(PathElement(self._node(level, pos - 1), Direction.RIGHT))
            else:
                path.append(PathElement(self._node(level, pos + 1), Direction.LEFT))
            pos >>= 1
        return MerkleProof(tuple(path))


__all__ = ["PoseidonMerkleTree", "MAX_DEPTH"]
