"""
Binary call dispatcher.

Routes `selector (4 bytes) || args` to the hash facade and the proof
verifier. The selector table is static: it is built once per dispatcher from
the entries below and never changes afterwards.

    signature                                                  result   mutates
    hashSingle(uint256)                                        uint256  no
    hashPair(uint256,uint256)                                  uint256  no
    hashArray(uint256[])                                       uint256  no
    registerRoot(uint256)                                      -        yes
    verifyProof(uint256,uint256[],uint256,uint256)             bool     no
    consumeProof(uint256,uint256[],uint256,uint256,uint256)    bool     yes
    batchVerify(uint256[],uint256[][],uint256[],uint256)       bool[]   no
    poseidon1 / poseidon2 / poseidonN                          aliases of hashSingle / hashPair / hashArray

Proof arguments are (leaf, siblings, pathBits, root[, nullifier]) where bit i
of pathBits set means level i is RIGHT.

Decoding runs in three passes so the reported error does not depend on which
check happens to run first:

  1. shape      (AbiDecodeError: truncation, trailing bytes, oversize arrays,
                 proof depth, stray direction bits; ArrayLengthMismatch for
                 parallel batch arrays)
  2. bounds     (FieldElementTooLarge for field words >= p)
  3. handler    (EmptyArray, InvalidProof, NullifierAlreadyUsed)

Errors raised by any pass propagate unchanged from `call`; `execute` turns
them into revert data instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from accumulator.types import MerkleProof, path_bits_fit
from accumulator.verifier import ProofVerifier
from poseidon.errors import ArrayLengthMismatch, PoseidonError
from poseidon.hash import PoseidonHasher

from .abi.decoding import check_fields, decode_args
from .abi.encoding import encode_args
from .abi.revert import encode_revert
from .abi.selector import SELECTOR_BYTES, canonical_signature, selector
from .abi.types import AbiType, ArrayType, BoolType, FieldType, UIntType
from .config import PrecompileConfig, load_config
from .errors import AbiDecodeError, InvalidSelector, StaticCallViolation
from .metrics import disabled_metrics, precompile_metrics

log = logging.getLogger("precompile.dispatch")

_F = FieldType()
_U = UIntType()
_FA = ArrayType(_F)


@dataclass(frozen=True)
class DispatchEntry:
    name: str
    inputs: Tuple[AbiType, ...]
    outputs: Tuple[AbiType, ...]
    handler: Callable[..., Any]
    mutates: bool
    # Extra shape checks on the decoded (not yet range-checked) arguments.
    check_shape: Optional[Callable[[List[Any]], None]] = None
    signature: str = field(init=False)
    selector: bytes = field(init=False)

    def __post_init__(self) -> None:
        sig = canonical_signature(self.name, self.inputs)
        object.__setattr__(self, "signature", sig)
        object.__setattr__(self, "selector", selector(sig))

    def decode(self, body: bytes, *, max_array_len: int) -> List[Any]:
        args = decode_args(body, self.inputs, max_array_len=max_array_len, check_bounds=False)
        if self.check_shape is not None:
            self.check_shape(args)
        for v, t in zip(args, self.inputs):
            check_fields(v, t)
        return args

    def encode(self, result: Any) -> bytes:
        if not self.outputs:
            return b""
        return encode_args(self.outputs, [result])

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "selector": "0x" + self.selector.hex(),
            "inputs": [t.name for t in self.inputs],
            "outputs": [t.name for t in self.outputs],
            "mutates": self.mutates,
        }


@dataclass(frozen=True)
class CallResult:
    """Outcome of `CallDispatcher.execute`: return data, or revert data on failure."""

    ok: bool
    output: bytes
    error: Optional[PoseidonError] = None


class CallDispatcher:
    def __init__(
        self,
        verifier: Optional[ProofVerifier] = None,
        *,
        hasher: Optional[PoseidonHasher] = None,
        config: Optional[PrecompileConfig] = None,
    ) -> None:
        self.config = config or load_config()
        self.hasher = hasher or (verifier.hasher if verifier is not None else PoseidonHasher())
        self.verifier = verifier if verifier is not None else ProofVerifier(hasher=self.hasher)
        self.metrics = precompile_metrics if self.config.metrics_enabled else disabled_metrics
        self._table: Dict[bytes, DispatchEntry] = {}
        self._by_name: Dict[str, DispatchEntry] = {}
        for entry in self._entries():
            if entry.selector in self._table:
                raise RuntimeError(
                    f"selector collision: {entry.signature} vs {self._table[entry.selector].signature}"
                )
            self._table[entry.selector] = entry
            self._by_name[entry.name] = entry
            self._by_name[entry.signature] = entry

    # ------------------------------------------------------------------ table

    def _entries(self) -> List[DispatchEntry]:
        proof_in = (_F, _FA, _U, _F)
        return [
            DispatchEntry("hashSingle", (_F,), (_F,), self._hash_single, False),
            DispatchEntry("hashPair", (_F, _F), (_F,), self._hash_pair, False),
            DispatchEntry("hashArray", (_FA,), (_F,), self._hash_array, False),
            DispatchEntry("registerRoot", (_F,), (), self._register_root, True),
            DispatchEntry("verifyProof", proof_in, (BoolType(),), self._verify_proof, False,
                          check_shape=self._check_single_proof),
            DispatchEntry("consumeProof", proof_in + (_F,), (BoolType(),), self._consume_proof, True,
                          check_shape=self._check_single_proof),
            DispatchEntry("batchVerify", (_FA, ArrayType(_FA), ArrayType(_U), _F), (ArrayType(BoolType()),),
                          self._batch_verify, False, check_shape=self._check_batch),
            DispatchEntry("poseidon1", (_F,), (_F,), self._hash_single, False),
            DispatchEntry("poseidon2", (_F, _F), (_F,), self._hash_pair, False),
            DispatchEntry("poseidonN", (_FA,), (_F,), self._hash_array, False),
        ]

    @property
    def entries(self) -> Tuple[DispatchEntry, ...]:
        return tuple(self._table.values())

    def entry(self, name: str) -> DispatchEntry:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"no entry named {name!r}") from None

    def selectors(self) -> Dict[str, str]:
        """signature -> 0x-prefixed selector hex."""
        return {e.signature: "0x" + e.selector.hex() for e in self._table.values()}

    def resolve(self, data: bytes) -> DispatchEntry:
        if len(data) < SELECTOR_BYTES:
            raise InvalidSelector(bytes(data), reason="calldata shorter than 4 bytes")
        sel = bytes(data[:SELECTOR_BYTES])
        entry = self._table.get(sel)
        if entry is None:
            raise InvalidSelector(sel)
        return entry

    def is_mutating(self, data: bytes) -> bool:
        return self.resolve(data).mutates

    # -------------------------------------------------------------- call path

    def call(self, data: bytes, *, static: bool = False) -> bytes:
        """
        Dispatch one call and return its return data.

        Raises the first error hit (see the module docstring for the order);
        on any error, accumulator state is left unchanged.
        """
        data = bytes(data)
        try:
            entry = self.resolve(data)
        except InvalidSelector as e:
            with self.metrics.observe_call("unknown") as obs:
                obs.error(e.to_dict()["code"])
            raise

        with self.metrics.observe_call(entry.name) as obs:
            try:
                if static and entry.mutates:
                    raise StaticCallViolation(entry.name)
                if len(data) > self.config.max_calldata_bytes:
                    raise AbiDecodeError(
                        "calldata exceeds size cap",
                        ctx={"length": len(data), "max": self.config.max_calldata_bytes},
                    )
                args = entry.decode(data[SELECTOR_BYTES:], max_array_len=self.config.max_array_len)
                log.debug("dispatch %s static=%s", entry.signature, static)
                out = entry.encode(entry.handler(*args))
            except PoseidonError as e:
                obs.error(e.to_dict()["code"])
                log.debug("dispatch %s failed: %s", entry.signature, e)
                raise
            obs.ok()
        return out

    def execute(self, data: bytes, *, static: bool = False) -> CallResult:
        """Like `call`, but a PoseidonError becomes a failed CallResult carrying revert data."""
        try:
            return CallResult(ok=True, output=self.call(data, static=static))
        except PoseidonError as e:
            return CallResult(ok=False, output=encode_revert(e), error=e)

    def encode_call(self, name: str, *args: Any) -> bytes:
        """Calldata for entry `name` with positional arguments."""
        entry = self.entry(name)
        return entry.selector + encode_args(entry.inputs, list(args))

    def decode_output(self, name: str, data: bytes) -> Any:
        """Decode return data of entry `name` (None for entries without outputs)."""
        entry = self.entry(name)
        if not entry.outputs:
            if data:
                raise AbiDecodeError("unexpected return data", ctx={"length": len(data)})
            return None
        return decode_args(data, entry.outputs, check_bounds=False)[0]

    # ---------------------------------------------------------- shape checks

    def _check_proof_shape(self, siblings: Sequence[int], bits: int, *, index: Optional[int] = None) -> None:
        ctx: Dict[str, Any] = {"depth": len(siblings)}
        if index is not None:
            ctx["index"] = index
        if len(siblings) > self.config.max_tree_depth:
            raise AbiDecodeError("proof deeper than max tree depth",
                                 ctx=dict(ctx, max=self.config.max_tree_depth))
        if not path_bits_fit(len(siblings), bits):
            raise AbiDecodeError("direction bits set beyond proof depth", ctx=dict(ctx, path_bits=hex(bits)))

    def _check_single_proof(self, args: List[Any]) -> None:
        self._check_proof_shape(args[1], args[2])

    def _check_batch(self, args: List[Any]) -> None:
        leaves, siblings, bits = args[0], args[1], args[2]
        if len(leaves) != len(siblings):
            raise ArrayLengthMismatch(len(leaves), len(siblings), what="leaves/proofs")
        if len(siblings) != len(bits):
            raise ArrayLengthMismatch(len(siblings), len(bits), what="siblings/pathBits")
        for i, (s, b) in enumerate(zip(siblings, bits)):
            self._check_proof_shape(s, b, index=i)

    # --------------------------------------------------------------- handlers

    def _hash_single(self, x: int) -> int:
        return self.hasher.hash_single(x)

    def _hash_pair(self, a: int, b: int) -> int:
        return self.hasher.hash_pair(a, b)

    def _hash_array(self, xs: List[int]) -> int:
        return self.hasher.hash_array(xs)

    def _register_root(self, root: int) -> None:
        if self.verifier.register_root(root):
            self.metrics.root_registered()

    def _verify_proof(self, leaf: int, siblings: List[int], bits: int, root: int) -> bool:
        return self.verifier.verify(leaf, MerkleProof.from_path_bits(siblings, bits), root)

    def _consume_proof(self, leaf: int, siblings: List[int], bits: int, root: int, nullifier: int) -> bool:
        ok = self.verifier.consume_proof(leaf, MerkleProof.from_path_bits(siblings, bits), root, nullifier)
        self.metrics.nullifier_consumed()
        return ok

    def _batch_verify(self, leaves: List[int], siblings: List[List[int]], bits: List[int], root: int) -> List[bool]:
        proofs = [MerkleProof.from_path_bits(s, b) for s, b in zip(siblings, bits)]
        return self.verifier.batch_verify(leaves, proofs, root)


__all__ = ["DispatchEntry", "CallResult", "CallDispatcher"]
