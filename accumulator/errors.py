"""
Application errors raised while consuming a membership proof.

Both are detected inside `ProofVerifier.consume_proof` and leave the
accumulator state untouched: the nullifier is only inserted after every
check has passed.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from poseidon.errors import ErrorCategory, ErrorCode, PoseidonError


class AccumulatorError(PoseidonError):
    category = ErrorCategory.APPLICATION


class NullifierAlreadyUsed(AccumulatorError):
    """The nullifier is already present in the NullifierSet."""

    def __init__(self, nullifier: int, *, ctx: Optional[Mapping[str, Any]] = None) -> None:
        base_ctx: Dict[str, Any] = {"nullifier": hex(nullifier)}
        if ctx:
            base_ctx.update(ctx)
        super().__init__(
            code=ErrorCode.NULLIFIER_ALREADY_USED,
            msg="nullifier already used",
            ctx=base_ctx,
        )
        self.nullifier = nullifier


class InvalidProof(AccumulatorError):
    """The recomputed root does not match, or the root is not registered."""

    def __init__(self, *, root: int, reason: str, ctx: Optional[Mapping[str, Any]] = None) -> None:
        base_ctx: Dict[str, Any] = {"root": hex(root), "reason": reason}
        if ctx:
            base_ctx.update(ctx)
        super().__init__(
            code=ErrorCode.INVALID_PROOF,
            msg="membership proof does not verify",
            ctx=base_ctx,
        )


__all__ = ["AccumulatorError", "NullifierAlreadyUsed", "InvalidProof"]
