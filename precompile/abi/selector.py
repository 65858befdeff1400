"""
Function selectors.

    selector = keccak256(canonical_signature)[:4]

    canonical_signature := name "(" typeName [ "," typeName ]* ")"

which is the Solidity convention, so selectors computed here agree with
`cast sig` / ethers `id(sig).slice(0, 10)` for the same signature string.
Keccak-256 (the pre-NIST padding variant, not SHA3-256) comes from
pycryptodome.
"""

from __future__ import annotations

from typing import Sequence

from Crypto.Hash import keccak

from .types import AbiType

SELECTOR_BYTES = 4


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def canonical_signature(name: str, inputs: Sequence[AbiType]) -> str:
    return f"{name}(" + ",".join(t.name for t in inputs) + ")"


def selector(signature: str) -> bytes:
    sig = signature.replace(" ", "")
    return keccak256(sig.encode("ascii"))[:SELECTOR_BYTES]


def selector_hex(signature: str) -> str:
    return "0x" + selector(signature).hex()


__all__ = ["SELECTOR_BYTES", "keccak256", "canonical_signature", "selector", "selector_hex"]
