#!/usr/bin/env python3
"""
precompile.cli.main
===================

Inspect and exercise the precompile from a shell.

Usage
-----
# Selector table
poseidon-precompile selectors
poseidon-precompile selectors --json

# Hash one value, a pair, or a left-folded array
poseidon-precompile hash 42
poseidon-precompile hash 100 200
poseidon-precompile hash 1 2 3 --hex

# Build calldata (arrays are comma separated; uint256[][] separates
# proofs with ';')
poseidon-precompile encode hashArray 1,2,3
poseidon-precompile encode verifyProof 22 0x1f,0x2e,0x3d 1 0xabc...

# Execute calldata against a fresh (or SQLite-backed) accumulator
poseidon-precompile call 0x<calldata> --static
poseidon-precompile call 0x<calldata> --state ./acc.sqlite

# Parameter table
poseidon-precompile params dump --out bn254_t3.json

# Build a demo tree and print root, proof and ready-made calldata
poseidon-precompile tree 11 22 33 --depth 4 --index 1 --nullifier 777
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from accumulator.merkle import PoseidonMerkleTree
from accumulator.state import SQLiteAccumulatorState
from accumulator.verifier import ProofVerifier
from poseidon import field
from poseidon.config import configure_logging
from poseidon.errors import PoseidonError
from poseidon.hash import PoseidonHasher
from poseidon.params import dump_params_json, get_params
from poseidon.version import runtime_banner

from ..abi.types import ArrayType, AbiType, UIntType, coerce_uint
from ..dispatch import CallDispatcher

app = typer.Typer(no_args_is_help=True, add_completion=False)
params_app = typer.Typer(no_args_is_help=True, add_completion=False, help="Parameter table utilities")
app.add_typer(params_app, name="params")

console = Console()


# ----------------- helpers -----------------

def _parse_word(text: str, typ: AbiType) -> int:
    t = text.strip().lower()
    try:
        value = int(t, 16) if t.startswith("0x") else int(t, 10)
    except ValueError:
        raise typer.BadParameter(f"not an integer: {text!r}")
    if isinstance(typ, UIntType):
        return coerce_uint(value)
    return value


def _parse_arg(text: str, typ: AbiType) -> Any:
    if isinstance(typ, ArrayType):
        sep = ";" if isinstance(typ.inner, ArrayType) else ","
        parts = text.split(sep) if text.strip() else []
        return [_parse_arg(p, typ.inner) for p in parts]
    return _parse_word(text, typ)


def _parse_hex(data: str) -> bytes:
    s = data.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise typer.BadParameter("calldata must be hex")


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return hex(value)
    if isinstance(value, list):
        return "[" + ", ".join(_fmt(v) for v in value) + "]"
    return str(value)


def _print_kv(title: str, rows: Dict[str, Any]) -> None:
    t = Table(title=title, box=box.SIMPLE)
    t.add_column("Field")
    t.add_column("Value", overflow="fold")
    for k, v in rows.items():
        t.add_row(k, str(v))
    console.print(Panel(t, title="poseidon-precompile", expand=False))


def _fail(err: PoseidonError) -> None:
    console.print(f"[red]error[/red] {escape(str(err))}")
    raise typer.Exit(1)


# ----------------- CLI -----------------

def _version_cb(value: bool) -> None:
    if value:
        typer.echo(runtime_banner())
        raise typer.Exit(0)


@app.callback()
def _meta(
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version and exit", callback=_version_cb, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    configure_logging(logging.DEBUG if verbose else None)


@app.command("selectors")
def selectors(as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table")) -> None:
    """List every dispatch entry with its selector."""
    entries = [e.describe() for e in CallDispatcher().entries]
    if as_json:
        typer.echo(json.dumps(entries, indent=2))
        return
    t = Table(title="Selectors", box=box.SIMPLE)
    for col in ("selector", "signature", "returns", "mutates"):
        t.add_column(col)
    for e in entries:
        t.add_row(e["selector"], e["signature"], ",".join(e["outputs"]) or "-", "yes" if e["mutates"] else "no")
    console.print(t)


@app.command("hash")
def hash_cmd(
    values: List[str] = typer.Argument(..., help="Field elements (decimal or 0x-hex)"),
    array: bool = typer.Option(False, "--array", "-a", help="Always use hashArray, even for 1 or 2 values"),
    params_name: Optional[str] = typer.Option(None, "--params", help="Registered parameter set name"),
    hex_only: bool = typer.Option(False, "--hex", help="Print only the 0x-hex digest"),
) -> None:
    """Hash one value (hashSingle), two (hashPair), or more (hashArray)."""
    try:
        hasher = PoseidonHasher(params_name)
    except KeyError as e:
        raise typer.BadParameter(str(e), param_hint="--params")
    try:
        xs = [field.parse_int(v) for v in values]
        if array or len(xs) > 2:
            op, digest = "hashArray", hasher.hash_array(xs)
        elif len(xs) == 1:
            op, digest = "hashSingle", hasher.hash_single(xs[0])
        else:
            op, digest = "hashPair", hasher.hash_pair(xs[0], xs[1])
    except PoseidonError as e:
        _fail(e)
        return
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if hex_only:
        typer.echo(hex(digest))
        return
    _print_kv("Poseidon", {"op": op, "inputs": len(xs), "hex": hex(digest), "dec": digest})


@app.command("encode")
def encode(
    name: str = typer.Argument(..., help="Entry name, e.g. hashPair"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments; arrays comma separated"),
) -> None:
    """Print calldata for an entry."""
    d = CallDispatcher()
    try:
        entry = d.entry(name)
    except KeyError as e:
        raise typer.BadParameter(str(e))
    raw = list(args or [])
    if len(raw) != len(entry.inputs):
        raise typer.BadParameter(f"{entry.signature} takes {len(entry.inputs)} argument(s), got {len(raw)}")
    try:
        values = [_parse_arg(a, t) for a, t in zip(raw, entry.inputs)]
    except ValueError as e:
        raise typer.BadParameter(str(e))
    try:
        data = d.encode_call(name, *values)
    except PoseidonError as e:
        _fail(e)
        return
    typer.echo("0x" + data.hex())


@app.command("call")
def call(
    calldata: str = typer.Argument(..., help="0x-hex calldata"),
    static: bool = typer.Option(False, "--static", help="Reject mutating entries"),
    state: Optional[Path] = typer.Option(None, "--state", help="SQLite accumulator file (default: in-memory)"),
) -> None:
    """Execute calldata and print the decoded result (or the revert data)."""
    data = _parse_hex(calldata)
    backend = SQLiteAccumulatorState(state) if state is not None else None
    try:
        d = CallDispatcher(ProofVerifier(backend) if backend is not None else None)
        res = d.execute(data, static=static)
    finally:
        if backend is not None:
            backend.close()

    if res.ok:
        entry = d.resolve(data)
        value = d.decode_output(entry.name, res.output)
        _print_kv("Call", {
            "entry": entry.signature,
            "status": "ok",
            "result": _fmt(value) if value is not None else "-",
            "returndata": "0x" + res.output.hex(),
        })
        return

    err = res.error
    rows: Dict[str, Any] = {"status": "revert", "revertdata": "0x" + res.output.hex()}
    if err is not None:
        info = err.to_dict()
        rows.update({"code": info["code"], "category": info["category"], "message": info["msg"]})
        if info["ctx"]:
            rows["ctx"] = json.dumps(info["ctx"])
    _print_kv("Call", rows)
    raise typer.Exit(1)


@params_app.command("dump")
def params_dump(
    name: Optional[str] = typer.Option(None, "--name", help="Registered parameter set (default: configured)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Print (or write) the round constants and MDS matrix."""
    try:
        params = get_params(name)
    except KeyError as e:
        raise typer.BadParameter(str(e))
    if out is not None:
        path = dump_params_json(params, out)
        console.print(f"wrote {path} (t={params.t} R_F={params.R_F} R_P={params.R_P})")
        return
    typer.echo(json.dumps(params.to_json_dict(), indent=2))


@app.command("tree")
def tree(
    leaves: List[str] = typer.Argument(..., help="Leaves (decimal or 0x-hex)"),
    depth: int = typer.Option(4, "--depth", "-d", help="Tree depth"),
    index: int = typer.Option(0, "--index", "-i", help="Leaf to prove"),
    nullifier: Optional[str] = typer.Option(None, "--nullifier", "-n", help="Also emit consumeProof calldata"),
) -> None:
    """Build a Poseidon Merkle tree and print a proof with matching calldata."""
    try:
        xs = [field.parse_int(v) for v in leaves]
        nul = field.parse_int(nullifier) if nullifier is not None else None
        t = PoseidonMerkleTree(xs, depth=depth)
        proof = t.proof(index)
    except PoseidonError as e:
        _fail(e)
        return
    except (ValueError, IndexError) as e:
        raise typer.BadParameter(str(e))

    d = CallDispatcher()
    siblings = list(proof.siblings)
    bits = proof.to_path_bits()
    leaf = xs[index]
    rows: Dict[str, Any] = {
        "root": hex(t.root),
        "leaf": hex(leaf),
        "pathBits": hex(bits),
        "siblings": _fmt(siblings),
        "registerRoot": "0x" + d.encode_call("registerRoot", t.root).hex(),
        "verifyProof": "0x" + d.encode_call("verifyProof", leaf, siblings, bits, t.root).hex(),
    }
    if nul is not None:
        rows["consumeProof"] = "0x" + d.encode_call("consumeProof", leaf, siblings, bits, t.root, nul).hex()
    _print_kv(f"Merkle tree (depth {depth}, {len(xs)} leaves)", rows)


def main() -> int:
    app()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
