"""
Binary calling convention: 4-byte keccak selectors followed by 32-byte
big-endian words, with dynamic arrays encoded inline as a length word and
their elements.
"""

from .decoding import DEFAULT_MAX_ARRAY_LEN, check_fields, decode_args, decode_value, read_word
from .encoding import encode_args, encode_bool, encode_call, encode_value, encode_word
from .revert import ERROR_SIGNATURES, UNKNOWN_ERROR, decode_revert, encode_revert
from .selector import SELECTOR_BYTES, canonical_signature, keccak256, selector, selector_hex
from .types import (UINT256_MAX, WORD_BYTES, ABITypeError, AbiType, ArrayType,
                    BoolType, FieldType, UIntType, coerce_uint, parse_type)

__all__ = [
    "WORD_BYTES",
    "UINT256_MAX",
    "SELECTOR_BYTES",
    "DEFAULT_MAX_ARRAY_LEN",
    "ABITypeError",
    "AbiType",
    "FieldType",
    "UIntType",
    "BoolType",
    "ArrayType",
    "parse_type",
    "coerce_uint",
    "keccak256",
    "canonical_signature",
    "selector",
    "selector_hex",
    "encode_word",
    "encode_bool",
    "encode_value",
    "encode_args",
    "encode_call",
    "read_word",
    "decode_value",
    "decode_args",
    "check_fields",
    "ERROR_SIGNATURES",
    "UNKNOWN_ERROR",
    "encode_revert",
    "decode_revert",
]
