"""
precompile
==========

Binary calling convention in front of the Poseidon hash and the proof
verifier: 4-byte keccak selectors, 32-byte big-endian words, inline
length-prefixed arrays.

    from precompile import CallDispatcher

    d = CallDispatcher()
    out = d.call(d.encode_call("hashPair", 100, 200))
    d.decode_output("hashPair", out)
"""

from __future__ import annotations

from .config import PrecompileConfig, load_config
from .dispatch import CallDispatcher, CallResult, DispatchEntry
from .errors import (AbiDecodeError, InvalidSelector, ProtocolError,
                     StaticCallViolation)

__all__ = [
    "PrecompileConfig",
    "load_config",
    "CallDispatcher",
    "CallResult",
    "DispatchEntry",
    "ProtocolError",
    "InvalidSelector",
    "AbiDecodeError",
    "StaticCallViolation",
]
