#!/usr/bin/env python3
"""
Deterministically (re)generate the published Poseidon reference vectors.

The vectors pin the outputs of the default parameter set so any other
implementation (circuit, native precompile, SDK) can be checked against them.
The parameter table itself is written next to them so it can be published
alongside.

Outputs:
  - <out>/vectors.json       {"params": "bn254_t3", "modulus": "...", "vectors": [...]}
  - <out>/bn254_t3.json      parameter table (load_params_json schema)

Usage:
  python3 -m poseidon.scripts.generate_vectors [--out poseidon/tests/fixtures]
                                               [--rewrite|--check] [-v]

Flags:
  --rewrite          Always rewrite outputs (even if unchanged).
  --check            Do not write; fail (exit 2) if any output would change.
  -v / --verbose     More logging.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from poseidon import field
from poseidon.config import configure_logging
from poseidon.hash import hash_array, hash_pair, hash_single
from poseidon.params import get_params
from poseidon.permutation import permute

log = logging.getLogger("poseidon.scripts.generate_vectors")

DEFAULT_OUT = Path(__file__).resolve().parents[1] / "tests" / "fixtures"

SINGLE_INPUTS = [42]
PAIR_INPUTS = [(100, 200)]
ARRAY_INPUTS = [[42], [100, 200]]
# circomlib lays out poseidon([a, b]) as the state (0, a, b), so permuting
# (0, 1, 2) reproduces its poseidon([1, 2]) digest.
PERMUTE_INPUTS = [[0, 1, 2]]


def build_vectors() -> Dict[str, Any]:
    vectors: List[Dict[str, Any]] = []
    for x in SINGLE_INPUTS:
        vectors.append({"op": "hashSingle", "inputs": [str(x)], "expected": str(hash_single(x))})
    for a, b in PAIR_INPUTS:
        vectors.append({"op": "hashPair", "inputs": [str(a), str(b)], "expected": str(hash_pair(a, b))})
    for xs in ARRAY_INPUTS:
        vectors.append({"op": "hashArray", "inputs": [str(x) for x in xs], "expected": str(hash_array(xs))})
    for state in PERMUTE_INPUTS:
        out = permute(state, get_params("bn254_t3"))[0]
        vectors.append({"op": "permute", "inputs": [str(x) for x in state], "expected": str(out)})
    return {"params": "bn254_t3", "modulus": str(field.P), "vectors": vectors}


def _render(obj: Any) -> str:
    return json.dumps(obj, indent=2) + "\n"


def _sync(path: Path, text: str, *, check: bool, rewrite: bool) -> bool:
    """Return True if the file is (or would be) changed."""
    current = path.read_text(encoding="utf-8") if path.exists() else None
    changed = current != text
    if check:
        if changed:
            log.error("out of date: %s", path)
        return changed
    if changed or rewrite:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        log.info("wrote %s", path)
    return changed


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--out", type=Path, default=DEFAULT_OUT)
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--rewrite", action="store_true")
    mode.add_argument("--check", action="store_true")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    outputs = {
        args.out / "vectors.json": _render(build_vectors()),
        args.out / "bn254_t3.json": _render(get_params("bn254_t3").to_json_dict()),
    }
    changed = [p for p, text in outputs.items() if _sync(p, text, check=args.check, rewrite=args.rewrite)]
    if args.check and changed:
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
