"""
Protocol errors for the binary calling convention.

Raised before a handler runs, so no state is touched:

  - InvalidSelector       buffer shorter than 4 bytes, or unknown selector
  - AbiDecodeError        argument bytes do not match the expected shape
  - StaticCallViolation   a read-only call selected a mutating entry
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from poseidon.errors import ErrorCategory, ErrorCode, PoseidonError


class ProtocolError(PoseidonError):
    category = ErrorCategory.PROTOCOL


class InvalidSelector(ProtocolError):
    def __init__(self, selector: bytes = b"", *, reason: str = "unknown selector") -> None:
        super().__init__(
            code=ErrorCode.INVALID_SELECTOR,
            msg=f"invalid function selector: {reason}",
            ctx={"selector": "0x" + bytes(selector).hex()},
        )
        self.selector = bytes(selector)


class AbiDecodeError(ProtocolError):
    def __init__(
        self,
        msg: str,
        *,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(code=ErrorCode.ABI_DECODE, msg=f"ABI decode error: {msg}", ctx=dict(ctx or {}), cause=cause)


class StaticCallViolation(ProtocolError):
    def __init__(self, name: str) -> None:
        base_ctx: Dict[str, Any] = {"function": name}
        super().__init__(
            code=ErrorCode.STATIC_CALL_VIOLATION,
            msg=f"{name} mutates state and cannot run in a static call",
            ctx=base_ctx,
        )


__all__ = ["ProtocolError", "InvalidSelector", "AbiDecodeError", "StaticCallViolation"]
