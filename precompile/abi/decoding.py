"""
Inverse of precompile.abi.encoding.

Top-level:
- decode_value(buf, typ, offset=0, max_array_len=...) -> (value, new_offset)
- decode_args(buf, types, max_array_len=...) -> list

Decoding is strict. Truncated words, array lengths above the cap, bool words
other than 0/1, and trailing bytes after the last argument raise
AbiDecodeError. Field-typed words are range-checked against p only after
the whole buffer has been parsed, so a malformed buffer always reports
AbiDecodeError even if it also carries out-of-range values.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple, Union

from poseidon import field

from ..errors import AbiDecodeError
from .types import (WORD_BYTES, ArrayType, AbiType, BoolType, FieldType,
                    UIntType, parse_type)

__all__ = [
    "DEFAULT_MAX_ARRAY_LEN",
    "read_word",
    "decode_value",
    "decode_args",
    "check_fields",
]

DEFAULT_MAX_ARRAY_LEN = 4_096


def read_word(buf: bytes, offset: int) -> Tuple[int, int]:
    j = offset + WORD_BYTES
    if j > len(buf):
        raise AbiDecodeError(
            "truncated payload",
            ctx={"offset": offset, "need": WORD_BYTES, "have": max(0, len(buf) - offset)},
        )
    return int.from_bytes(buf[offset:j], "big"), j


def decode_value(
    buf: bytes,
    typ: Union[str, AbiType],
    offset: int = 0,
    *,
    max_array_len: int = DEFAULT_MAX_ARRAY_LEN,
) -> Tuple[Any, int]:
    """
    Decode a single value of the given ABI type from buf[offset:].
    Returns (value, new_offset). Field words are *not* range-checked here.
    """
    if isinstance(typ, str):
        typ = parse_type(typ)

    if isinstance(typ, (FieldType, UIntType)):
        return read_word(buf, offset)

    if isinstance(typ, BoolType):
        v, j = read_word(buf, offset)
        if v not in (0, 1):
            raise AbiDecodeError("invalid boolean word", ctx={"offset": offset})
        return bool(v), j

    if isinstance(typ, ArrayType):
        n, i = read_word(buf, offset)
        if n > max_array_len:
            raise AbiDecodeError(
                "array length exceeds cap",
                ctx={"offset": offset, "length": n, "max": max_array_len},
            )
        # Cheap lower bound for flat arrays before allocating anything.
        if not isinstance(typ.inner, ArrayType) and i + n * WORD_BYTES > len(buf):
            raise AbiDecodeError(
                "truncated array",
                ctx={"offset": offset, "length": n, "have_words": (len(buf) - i) // WORD_BYTES},
            )
        out: List[Any] = []
        for _ in range(n):
            v, i = decode_value(buf, typ.inner, i, max_array_len=max_array_len)
            out.append(v)
        return out, i

    raise TypeError(f"unsupported ABI type: {typ!r}")


def check_fields(value: Any, typ: AbiType) -> None:
    """Range-check every field-typed word inside `value` (raises FieldElementTooLarge)."""
    if isinstance(typ, FieldType):
        field.validate(value)
    elif isinstance(typ, ArrayType):
        for v in value:
            check_fields(v, typ.inner)


def decode_args(
    buf: bytes,
    types: Sequence[Union[str, AbiType]],
    *,
    max_array_len: int = DEFAULT_MAX_ARRAY_LEN,
    check_bounds: bool = True,
) -> List[Any]:
    """
    Decode `buf` as the concatenation of `types`, consuming it exactly.

    With check_bounds=False the field range check is left to the caller
    (see check_fields), which lets it finish its own shape checks first.
    """
    parsed = [parse_type(t) if isinstance(t, str) else t for t in types]
    out: List[Any] = []
    i = 0
    for t in parsed:
        v, i = decode_value(buf, t, i, max_array_len=max_array_len)
        out.append(v)
    if i != len(buf):
        raise AbiDecodeError(
            "unexpected trailing bytes",
            ctx={"consumed": i, "length": len(buf)},
        )
    if check_bounds:
        for v, t in zip(out, parsed):
            check_fields(v, t)
    return out
