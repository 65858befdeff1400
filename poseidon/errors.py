"""
Typed exceptions for the Poseidon precompile core.

Design goals
- Structured: machine-readable code + human message + contextual fields.
- Safe: no heavy deps; pure stdlib.
- Composable: lower-level exceptions are kept as `cause`.

The hierarchy is rooted here and extended by `precompile.errors` (protocol
failures) and `accumulator.errors` (application failures). This module holds
the *input validation* errors, raised before any computation runs:

  - PoseidonError (base)
  - FieldElementTooLarge
  - EmptyArray
  - ArrayLengthMismatch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorCode(str, Enum):
    """Canonical error codes shared by every layer of the core."""

    UNKNOWN = "UNKNOWN"

    # Input validation
    FIELD_ELEMENT_TOO_LARGE = "FIELD_ELEMENT_TOO_LARGE"
    EMPTY_ARRAY = "EMPTY_ARRAY"
    ARRAY_LENGTH_MISMATCH = "ARRAY_LENGTH_MISMATCH"

    # Protocol (binary calling convention)
    INVALID_SELECTOR = "INVALID_SELECTOR"
    ABI_DECODE = "ABI_DECODE"
    STATIC_CALL_VIOLATION = "STATIC_CALL_VIOLATION"

    # Application (proof consumption)
    INVALID_PROOF = "INVALID_PROOF"
    NULLIFIER_ALREADY_USED = "NULLIFIER_ALREADY_USED"


class ErrorCategory(str, Enum):
    INPUT = "input"
    PROTOCOL = "protocol"
    APPLICATION = "application"


@dataclass
class PoseidonError(Exception):
    """
    Base structured error.

    Fields:
      code:  stable machine code (ErrorCode | str)
      msg:   human-readable summary
      ctx:   small dict of contextual fields (ints, hex strings, lengths)
      cause: optional underlying exception (not serialized)
    """

    code: ErrorCode | str = ErrorCode.UNKNOWN
    msg: str = "poseidon error"
    ctx: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    category = ErrorCategory.INPUT

    def __post_init__(self) -> None:
        if not isinstance(self.ctx, dict):
            self.ctx = {"_ctx_type_error": str(type(self.ctx)), "repr": repr(self.ctx)}

    def __str__(self) -> str:
        parts = [f"[{_code_str(self.code)}] {self.msg}"]
        if self.ctx:
            parts.append(f"ctx={self.ctx}")
        if self.cause:
            parts.append(f"cause={self.cause!r}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": _code_str(self.code),
            "category": self.category.value,
            "msg": self.msg,
            "ctx": dict(self.ctx),
        }


def _code_str(code: ErrorCode | str) -> str:
    return code.value if isinstance(code, ErrorCode) else str(code)


class FieldElementTooLarge(PoseidonError):
    """A value is not a canonical residue (x >= p, or negative)."""

    def __init__(self, value: int, *, modulus: int, ctx: Optional[Mapping[str, Any]] = None) -> None:
        base_ctx: Dict[str, Any] = {"value": hex(value) if value >= 0 else str(value), "modulus": hex(modulus)}
        if ctx:
            base_ctx.update(ctx)
        super().__init__(
            code=ErrorCode.FIELD_ELEMENT_TOO_LARGE,
            msg="field element is not a canonical residue",
            ctx=base_ctx,
        )
        self.value = value


class EmptyArray(PoseidonError):
    """hash_array() was given no elements."""

    def __init__(self, *, ctx: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_ARRAY,
            msg="expected at least one field element, got 0",
            ctx=dict(ctx or {}),
        )


class ArrayLengthMismatch(PoseidonError):
    """Two parallel arrays (e.g. leaves and proofs) differ in length."""

    def __init__(self, left: int, right: int, *, what: str = "arrays") -> None:
        super().__init__(
            code=ErrorCode.ARRAY_LENGTH_MISMATCH,
            msg=f"{what} length mismatch: {left} != {right}",
            ctx={"left": int(left), "right": int(right)},
        )


__all__ = [
    "ErrorCode",
    "ErrorCategory",
    "PoseidonError",
    "FieldElementTooLarge",
    "EmptyArray",
    "ArrayLengthMismatch",
]
