from __future__ import annotations

"""
Prometheus metrics for the call dispatcher.

All collectors live on a dedicated CollectorRegistry (REG) so that embedding
hosts can expose them next to their own without name clashes, and tests can
read them back without touching the process-global registry.

Usage
-----
from precompile.metrics import precompile_metrics

with precompile_metrics.observe_call("hashPair") as obs:
    try:
        out = handler(...)
        obs.ok()
    except PoseidonError as e:
        obs.error(e.to_dict()["code"])
        raise

precompile_metrics.root_registered()
precompile_metrics.nullifier_consumed()
"""

import time
import typing as t

from prometheus_client import (CollectorRegistry, Counter, Histogram,
                               generate_latest)

REG = CollectorRegistry(auto_describe=True)


# ---- Metric definitions ----------------------------------------------------

CALLS = Counter(
    "poseidon_precompile_calls_total",
    "Dispatched precompile calls by operation, status and error code.",
    ["op", "status", "code"],
    registry=REG,
)

CALL_LATENCY = Histogram(
    "poseidon_precompile_call_duration_seconds",
    "Precompile call latency in seconds by operation.",
    ["op"],
    # One permutation is ~ms in pure Python; arrays and batches scale linearly.
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1, 5),
    registry=REG,
)

ACCUMULATOR_MUTATIONS = Counter(
    "poseidon_accumulator_mutations_total",
    "Accumulator state mutations by kind.",
    ["kind"],  # kind ∈ {"root_registered","nullifier_consumed"}
    registry=REG,
)


# ---- Call observation ------------------------------------------------------


class _CallObservation:
    __slots__ = ("_op", "_start", "_ended", "_enabled")

    def __init__(self, op: str, enabled: bool = True) -> None:
        self._op = op
        self._start = time.perf_counter()
        self._ended = False
        self._enabled = enabled

    def __enter__(self) -> "_CallObservation":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Anything that escapes without an explicit mark counts as internal.
        if exc_type is not None:
            self.error("internal")
        else:
            self.ok()

    def _finish(self, status: str, code: str) -> None:
        if self._ended:
            return
        self._ended = True
        if not self._enabled:
            return
        dt = time.perf_counter() - self._start
        CALLS.labels(op=self._op, status=status, code=code).inc()
        CALL_LATENCY.labels(op=self._op).observe(dt)

    def ok(self) -> None:
        """Mark successful completion."""
        self._finish("ok", "0")

    def error(self, code: str = "internal") -> None:
        """Mark failed completion, with the error code as label."""
        self._finish("error", code)


class _PrecompileMetrics:
    """Explicit instrumentation hooks; a disabled instance records nothing."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def observe_call(self, op: str) -> _CallObservation:
        return _CallObservation(op, enabled=self.enabled)

    def root_registered(self) -> None:
        if self.enabled:
            ACCUMULATOR_MUTATIONS.labels(kind="root_registered").inc()

    def nullifier_consumed(self) -> None:
        if self.enabled:
            ACCUMULATOR_MUTATIONS.labels(kind="nullifier_consumed").inc()


precompile_metrics = _PrecompileMetrics()
disabled_metrics = _PrecompileMetrics(enabled=False)


def render_latest() -> bytes:
    """Prometheus text exposition of REG."""
    return generate_latest(REG)


def sample_value(name: str, labels: t.Optional[t.Dict[str, str]] = None) -> float:
    """Current value of one sample in REG (0.0 if it has not been recorded)."""
    v = REG.get_sample_value(name, labels or {})
    return float(v) if v is not None else 0.0


__all__ = [
    "REG",
    "CALLS",
    "CALL_LATENCY",
    "ACCUMULATOR_MUTATIONS",
    "precompile_metrics",
    "disabled_metrics",
    "render_latest",
    "sample_value",
]
