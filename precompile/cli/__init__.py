"""
precompile.cli
--------------

Command-line entrypoint for the Poseidon precompile core, exposed as the
`poseidon-precompile` console script (precompile.cli.main:main).
"""

from __future__ import annotations

from .main import app, main

__all__ = ["app", "main"]
