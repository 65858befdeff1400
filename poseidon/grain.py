"""
Grain LFSR parameter generation for Poseidon.

This is the round-constant / MDS derivation procedure published with the
Poseidon paper (reference script `generate_parameters_grain`), restricted to
prime fields and the x^alpha S-box:

1. An 80-bit register is seeded with the parameter description:

       field (2b) | sbox (4b) | n (12b) | t (12b) | R_F (10b) | R_P (10b) | 1^30

   where field=1 means "prime field" and sbox=0 means x^alpha.
2. The register is clocked 160 times and the output discarded.
3. Output bits are taken through a self-shrinking filter: bits are drawn in
   pairs (b1, b2) and b2 is emitted only when b1 == 1.
4. Round constants are n-bit big-endian integers, rejection-sampled until
   they fall below p; (R_F + R_P) * t of them, in round-major order.
5. The MDS matrix is a Cauchy matrix M[i][j] = 1 / (x_i + y_j) built from 2t
   further n-bit samples reduced mod p (resampled while the 2t values are not
   distinct or any x_i + y_j == 0).

The output depends only on (n, t, R_F, R_P, p). Callers cache the result; see
poseidon.params.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Tuple

FIELD_PRIME = 1
SBOX_POW = 0

_STATE_BITS = 80
_WARMUP_CLOCKS = 160


def _seed_bits(field: int, sbox: int, n: int, t: int, r_f: int, r_p: int) -> List[int]:
    bits: List[int] = []
    for value, width in ((field, 2), (sbox, 4), (n, 12), (t, 12), (r_f, 10), (r_p, 10)):
        if value < 0 or value >= (1 << width):
            raise ValueError(f"grain seed value {value} does not fit in {width} bits")
        bits.extend(int(c) for c in format(value, f"0{width}b"))
    bits.extend([1] * 30)
    assert len(bits) == _STATE_BITS
    return bits


class GrainLFSR:
    """Self-shrinking Grain LFSR as used by the Poseidon reference generator."""

    __slots__ = ("_state",)

    def __init__(self, *, n: int, t: int, r_f: int, r_p: int, field: int = FIELD_PRIME, sbox: int = SBOX_POW):
        self._state: Deque[int] = deque(_seed_bits(field, sbox, n, t, r_f, r_p), maxlen=_STATE_BITS)
        for _ in range(_WARMUP_CLOCKS):
            self._clock()

    def _clock(self) -> int:
        s = self._state
        bit = s[62] ^ s[51] ^ s[38] ^ s[23] ^ s[13] ^ s[0]
        # maxlen drops s[0]
        s.append(bit)
        return bit

    def next_bit(self) -> int:
        while True:
            first = self._clock()
            second = self._clock()
            if first == 1:
                return second

    def next_bits(self, n: int) -> int:
        """n output bits as a big-endian integer."""
        v = 0
        for _ in range(n):
            v = (v << 1) | self.next_bit()
        return v

    def next_field_element(self, n: int, modulus: int) -> int:
        """Rejection-sample an n-bit integer below `modulus`."""
        v = self.next_bits(n)
        while v >= modulus:
            v = self.next_bits(n)
        return v


def generate_round_constants(
    lfsr: GrainLFSR, *, n: int, t: int, r_f: int, r_p: int, modulus: int
) -> Tuple[Tuple[int, ...], ...]:
    flat = [lfsr.next_field_element(n, modulus) for _ in range((r_f + r_p) * t)]
    return tuple(tuple(flat[r * t:(r + 1) * t]) for r in range(r_f + r_p))


def generate_cauchy_mds(lfsr: GrainLFSR, *, n: int, t: int, modulus: int) -> Tuple[Tuple[int, ...], ...]:
    while True:
        samples = [lfsr.next_bits(n) % modulus for _ in range(2 * t)]
        while len(set(samples)) != len(samples):
            samples = [lfsr.next_bits(n) % modulus for _ in range(2 * t)]
        xs, ys = samples[:t], samples[t:]
        if any((x + y) % modulus == 0 for x in xs for y in ys):
            continue
        return tuple(
            tuple(pow((x + y) % modulus, modulus - 2, modulus) for y in ys)
            for x in xs
        )


def generate_parameters(
    *, n: int, t: int, r_f: int, r_p: int, modulus: int
) -> Tuple[Tuple[Tuple[int, ...], ...], Tuple[Tuple[int, ...], ...]]:
    """
    Return (round_constants, mds) for the given shape.

    Constants are drawn first and the matrix from the continuing stream, as
    the reference generator does.
    """
    lfsr = GrainLFSR(n=n, t=t, r_f=r_f, r_p=r_p)
    rc = generate_round_constants(lfsr, n=n, t=t, r_f=r_f, r_p=r_p, modulus=modulus)
    mds = generate_cauchy_mds(lfsr, n=n, t=t, modulus=modulus)
    return rc, mds


__all__ = [
    "GrainLFSR",
    "generate_round_constants",
    "generate_cauchy_mds",
    "generate_parameters",
]
