"""
Version of the Poseidon precompile core.

It can be overridden at build time with the env var POSEIDON_PRECOMPILE_VERSION.
The ABI revision is bumped independently whenever selectors or the word
layout of any exposed call change.
"""

from __future__ import annotations

import os

__version__ = os.getenv("POSEIDON_PRECOMPILE_VERSION", "0.1.0")

# Binary calling convention revision (selector table + word layout).
ABI_VERSION = 1


def runtime_banner() -> str:
    return f"poseidon-precompile {__version__} (abi v{ABI_VERSION})"


__all__ = ["__version__", "ABI_VERSION", "runtime_banner"]
