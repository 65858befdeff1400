"""
BN254 scalar field (Fr) arithmetic for the Poseidon permutation.

Every FieldElement in the core is a plain `int` in [0, P). Values are reduced
before they are returned, so no operation here can hand back an out-of-range
residue. Inputs coming from outside (calldata, JSON, CLI) must go through
`validate()` first: the core never trusts caller-side reduction.

The modulus is the BN254 group order, the same value py_ecc exposes as
`bn128.curve_order`; we keep a literal copy and check the two agree at import.

It is **not** constant-time and is not meant for secret-bearing computations.
"""

from __future__ import annotations

from typing import Iterable, List

from py_ecc.bn128 import curve_order

from .errors import FieldElementTooLarge

P: int = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FIELD_BYTE_LEN = 32

if int(curve_order) != P:  # pragma: no cover
    raise ImportError("py_ecc bn128.curve_order disagrees with the Poseidon field modulus")


def is_canonical(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x < P


def validate(x: int) -> int:
    """
    Return `x` unchanged if it is a canonical residue, else raise.

    Raises TypeError for non-integers and FieldElementTooLarge for x >= P
    (negative values are rejected with the same error class).
    """
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"field element must be int, got {type(x).__name__}")
    if x < 0 or x >= P:
        raise FieldElementTooLarge(x, modulus=P)
    return x


def validate_all(xs: Iterable[int]) -> List[int]:
    return [validate(x) for x in xs]


# ---------------------------
# Ring operations (mod P)
# ---------------------------


def add(a: int, b: int) -> int:
    return (a + b) % P


def sub(a: int, b: int) -> int:
    return (a - b) % P


def neg(a: int) -> int:
    return (-a) % P


def mul(a: int, b: int) -> int:
    return (a * b) % P


def pow5(a: int) -> int:
    # x^5 = x * (x^2)^2: two squarings and one multiply
    x2 = mul(a, a)
    x4 = mul(x2, x2)
    return mul(a, x4)


def inv(a: int) -> int:
    """Multiplicative inverse via Fermat's little theorem."""
    if a % P == 0:
        raise ZeroDivisionError("inverse of zero in Fr")
    return pow(a, P - 2, P)


# ---------------------------
# Serialization
# ---------------------------


def to_bytes32(x: int) -> bytes:
    return validate(x).to_bytes(FIELD_BYTE_LEN, "big")


def from_bytes32(b: bytes) -> int:
    """Parse exactly 32 big-endian bytes; the value must already be < P."""
    if len(b) != FIELD_BYTE_LEN:
        raise ValueError(f"expected {FIELD_BYTE_LEN} bytes, got {len(b)}")
    return validate(int.from_bytes(b, "big"))


def parse_int(s: str | int) -> int:
    """Parse a decimal or 0x-hex string into a validated field element."""
    if isinstance(s, int):
        return validate(s)
    text = str(s).strip().lower()
    value = int(text, 16) if text.startswith("0x") else int(text, 10)
    return validate(value)


__all__ = [
    "P",
    "FIELD_BYTE_LEN",
    "is_canonical",
    "validate",
    "validate_all",
    "add",
    "sub",
    "neg",
    "mul",
    "pow5",
    "inv",
    "to_bytes32",
    "from_bytes32",
    "parse_int",
]
