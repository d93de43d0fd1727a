"""A small deterministic xorshift generator used for random frame colours."""

from __future__ import annotations

import struct
import threading
from typing import Callable

__all__ = ["XorShift64", "thread_rng"]

_MASK64 = (1 << 64) - 1
_PRECISION = 53
_SCALE = 1.0 / (1 << _PRECISION)
_DEFAULT_SEED = 1234


class XorShift64:
    """A 64-bit xorshift pseudo-random number generator."""

    def __init__(self, seed: int) -> None:
        self._state = seed & _MASK64

    def next_u64(self) -> int:
        """Advance the generator and return the next 64-bit value."""
        x = self._state
        x ^= (x << 13) & _MASK64
        x ^= x >> 7
        x ^= (x << 17) & _MASK64
        self._state = x
        return x

    def next_float(self) -> float:
        """Return a float in ``[0, 1)`` built from the 53 most significant bits."""
        return (self.next_u64() >> (64 - _PRECISION)) * _SCALE


def _to_f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_local = threading.local()


def _thread_generator() -> XorShift64:
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = XorShift64(_DEFAULT_SEED)
        _local.rng = rng
    return rng


def thread_rng() -> Callable[[], float]:
    """Return a callable drawing single-precision floats from this thread's generator."""

    def draw() -> float:
        return _to_f32(_thread_generator().next_float())

    return draw