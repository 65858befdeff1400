"""
Word encoding for the precompile calling convention.

Layout
------
- scalar (field / uint256 / bool):  one 32-byte big-endian word
- T[]:                              32-byte length word N || N encodings of T

No offsets, no padding: arguments are concatenated in order. A call is

    selector (4 bytes) || encode_args(inputs, values)

This module only encodes; decoding lives in precompile.abi.decoding.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Union

from .selector import selector
from .types import (WORD_BYTES, ArrayType, AbiType, BoolType, FieldType,
                    UIntType, coerce_uint, parse_type)

__all__ = [
    "encode_word",
    "encode_bool",
    "encode_value",
    "encode_args",
    "encode_call",
]


def encode_word(value: int) -> bytes:
    return coerce_uint(value).to_bytes(WORD_BYTES, "big")


def encode_bool(value: Any) -> bytes:
    return encode_word(1 if BoolType().validate(value) else 0)


def encode_value(value: Any, typ: Union[str, AbiType]) -> bytes:
    """Encode a single value according to the given ABI type (string or object)."""
    if isinstance(typ, str):
        typ = parse_type(typ)

    if isinstance(typ, BoolType):
        return encode_bool(value)
    if isinstance(typ, (FieldType, UIntType)):
        return encode_word(typ.validate(value))
    if isinstance(typ, ArrayType):
        items = list(value)
        parts: List[bytes] = [encode_word(len(items))]
        parts.extend(encode_value(v, typ.inner) for v in items)
        return b"".join(parts)
    raise TypeError(f"unsupported ABI type: {typ!r}")


def encode_args(types: Sequence[Union[str, AbiType]], values: Sequence[Any]) -> bytes:
    if len(types) != len(values):
        raise ValueError("types and values length mismatch")
    return b"".join(encode_value(v, t) for t, v in zip(types, values))


def encode_call(signature: str, types: Sequence[Union[str, AbiType]], values: Sequence[Any]) -> bytes:
    return selector(signature) + encode_args(types, values)
