"""
Revert payloads for failed calls.

A failure is returned to the caller as a Solidity-style custom error:

    keccak256("ErrorName(argTypes)")[:4] || encode_args(argTypes, args)

Only the arguments that identify *which* value failed are carried
(the offending field element, the two mismatched lengths, the reused
nullifier). Anything not in the table maps to UnknownError().
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from poseidon.errors import ArrayLengthMismatch, EmptyArray, FieldElementTooLarge

from accumulator.errors import InvalidProof, NullifierAlreadyUsed

from ..errors import AbiDecodeError, InvalidSelector, StaticCallViolation
from .decoding import decode_args
from .encoding import encode_args
from .selector import SELECTOR_BYTES, selector
from .types import UINT256_MAX

__all__ = ["ERROR_SIGNATURES", "UNKNOWN_ERROR", "encode_revert", "decode_revert"]

UNKNOWN_ERROR = "UnknownError()"

# exception class -> (signature, arg types)
ERROR_SIGNATURES: Dict[type, Tuple[str, Tuple[str, ...]]] = {
    FieldElementTooLarge: ("FieldElementTooLarge(uint256)", ("uint256",)),
    EmptyArray: ("EmptyArray()", ()),
    ArrayLengthMismatch: ("ArrayLengthMismatch(uint256,uint256)", ("uint256", "uint256")),
    InvalidSelector: ("InvalidSelector()", ()),
    AbiDecodeError: ("AbiDecodeError()", ()),
    StaticCallViolation: ("StaticCallViolation()", ()),
    InvalidProof: ("InvalidProof()", ()),
    NullifierAlreadyUsed: ("NullifierAlreadyUsed(uint256)", ("uint256",)),
}

_BY_SELECTOR: Dict[bytes, Tuple[str, Tuple[str, ...]]] = {
    selector(sig): (sig, types) for sig, types in ERROR_SIGNATURES.values()
}
_BY_SELECTOR[selector(UNKNOWN_ERROR)] = (UNKNOWN_ERROR, ())


def _args_for(err: BaseException) -> List[Any]:
    if isinstance(err, FieldElementTooLarge):
        # Negative values never reach the wire; clamp for Python-side callers.
        v = err.value if 0 <= err.value <= UINT256_MAX else 0
        return [v]
    if isinstance(err, ArrayLengthMismatch):
        return [err.ctx["left"], err.ctx["right"]]
    if isinstance(err, NullifierAlreadyUsed):
        return [err.nullifier]
    return []


def encode_revert(err: BaseException) -> bytes:
    for cls, (sig, types) in ERROR_SIGNATURES.items():
        if isinstance(err, cls):
            return selector(sig) + encode_args(types, _args_for(err))
    return selector(UNKNOWN_ERROR)


def decode_revert(data: bytes) -> Tuple[str, List[int]]:
    """
    Inverse of encode_revert: returns (signature, args).

    Raises AbiDecodeError for unknown selectors or malformed argument bytes.
    """
    data = bytes(data)
    if len(data) < SELECTOR_BYTES:
        raise AbiDecodeError("revert payload shorter than a selector", ctx={"length": len(data)})
    entry: Optional[Tuple[str, Tuple[str, ...]]] = _BY_SELECTOR.get(data[:SELECTOR_BYTES])
    if entry is None:
        raise AbiDecodeError("unknown error selector", ctx={"selector": "0x" + data[:SELECTOR_BYTES].hex()})
    sig, types = entry
    return sig, decode_args(data[SELECTOR_BYTES:], types)
