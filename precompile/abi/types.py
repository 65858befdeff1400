"""
ABI type definitions for the precompile calling convention.

The surface is intentionally small:
  - field      a BN254 field element; canonical name "uint256", decoded
               values must be < p
  - uint256    a raw 256-bit unsigned word (e.g. packed direction bits)
  - bool       a word holding 0 or 1
  - T[]        a dynamic array: length word, then the elements inline

Every scalar occupies exactly one 32-byte big-endian word. Arrays nest
(`uint256[][]` is a length word followed by that many inline `uint256[]`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from poseidon import field

__all__ = [
    "WORD_BYTES",
    "UINT256_MAX",
    "ABITypeError",
    "FieldType",
    "UIntType",
    "BoolType",
    "ArrayType",
    "AbiType",
    "parse_type",
    "coerce_uint",
]

WORD_BYTES = 32
UINT256_MAX = (1 << 256) - 1


class ABITypeError(TypeError):
    """Raised when an ABI type spec is malformed or unsupported."""


def coerce_uint(value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("uint256 must be a Python int")
    if value < 0 or value > UINT256_MAX:
        raise ValueError("uint256 out of range")
    return value


@dataclass(frozen=True)
class FieldType:
    def validate(self, value: Any) -> int:
        return field.validate(value)

    @property
    def name(self) -> str:
        return "uint256"


@dataclass(frozen=True)
class UIntType:
    def validate(self, value: Any) -> int:
        return coerce_uint(value)

    @property
    def name(self) -> str:
        return "uint256"


@dataclass(frozen=True)
class BoolType:
    def validate(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value in (0, 1):
            return bool(value)
        raise ValueError("bool must be True/False")

    @property
    def name(self) -> str:
        return "bool"


@dataclass(frozen=True)
class ArrayType:
    inner: "AbiType"

    def validate(self, value: Any) -> list:
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise TypeError(f"{self.name} value must be a sequence")
        return [self.inner.validate(v) for v in value]

    @property
    def name(self) -> str:
        return f"{self.inner.name}[]"


AbiType = Union[FieldType, UIntType, BoolType, ArrayType]


def parse_type(spec: str) -> AbiType:
    """
    Parse a textual type spec.

    Supported forms: "field", "uint256" (alias "uint"), "bool", and any of
    these followed by one or more "[]".
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ABITypeError("type spec must be a non-empty string")
    s = spec.strip().lower()
    if s.endswith("[]"):
        return ArrayType(parse_type(s[:-2]))
    if s == "field":
        return FieldType()
    if s in ("uint256", "uint"):
        return UIntType()
    if s == "bool":
        return BoolType()
    raise ABITypeError(f"unsupported type spec: {spec!r}")
