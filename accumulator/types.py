"""
Merkle proof types.

A MerkleProof is an ordered path from leaf to root, one PathElement per tree
level. Each element carries the sibling hash and the side the *running
candidate* occupies at that level:

  - Direction.LEFT:  candidate is the left child  -> H(candidate, sibling)
  - Direction.RIGHT: candidate is the right child -> H(sibling, candidate)

On the wire the directions are packed into one uint256 "path bits" word:
bit i set means level i is RIGHT. For a tree built by index this word is
simply the leaf index.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from poseidon import field
from poseidon.errors import ArrayLengthMismatch


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def from_bit(cls, bit: int) -> "Direction":
        return cls.RIGHT if bit else cls.LEFT

    @property
    def bit(self) -> int:
        return 1 if self is Direction.RIGHT else 0


@dataclass(frozen=True)
class PathElement:
    sibling: int
    direction: Direction


@dataclass(frozen=True)
class MerkleProof:
    path: Tuple[PathElement, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))

    def __len__(self) -> int:
        return len(self.path)

    def __iter__(self):
        return iter(self.path)

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def siblings(self) -> Tuple[int, ...]:
        return tuple(e.sibling for e in self.path)

    @property
    def directions(self) -> Tuple[Direction, ...]:
        return tuple(e.direction for e in self.path)

    @classmethod
    def from_path_bits(cls, siblings: Sequence[int], path_bits: int) -> "MerkleProof":
        """
        Build a proof from siblings + packed direction bits.

        Bits at or above len(siblings) must be zero; callers decoding
        untrusted input should check that first (see path_bits_fit).
        """
        if not path_bits_fit(len(siblings), path_bits):
            raise ValueError(f"path bits {path_bits:#x} do not fit a proof of depth {len(siblings)}")
        return cls(
            tuple(PathElement(s, Direction.from_bit((path_bits >> i) & 1)) for i, s in enumerate(siblings))
        )

    @classmethod
    def from_lists(cls, siblings: Sequence[int], directions: Sequence[Direction]) -> "MerkleProof":
        if len(siblings) != len(directions):
            raise ArrayLengthMismatch(len(siblings), len(directions), what="siblings/directions")
        return cls(tuple(PathElement(s, Direction(d)) for s, d in zip(siblings, directions)))

    def to_path_bits(self) -> int:
        bits = 0
        for i, e in enumerate(self.path):
            bits |= e.direction.bit << i
        return bits

    def validate(self) -> "MerkleProof":
        for e in self.path:
            field.validate(e.sibling)
        return self


def path_bits_fit(depth: int, path_bits: int) -> bool:
    return 0 <= path_bits and (path_bits >> depth) == 0


__all__ = ["Direction", "PathElement", "MerkleProof", "path_bits_fit"]
