"""SplitMix64 pseudo-random generator.

A tiny 64-bit generator whose whole state is one integer. Each trial owns
its own instance, so results never depend on the process-wide ``random``
module or on which thread happened to draw first.

Reference:
    Steele, Lea, Flood. "Fast Splittable Pseudorandom Number Generators" (2014)
"""

from __future__ import annotations

from collections.abc import Iterator

MASK64 = (1 << 64) - 1

_GOLDEN_GAMMA = 0x9E3779B97F4A7C15
_MIX_1 = 0xBF58476D1CE4E5B9
_MIX_2 = 0x94D049BB133111EB


class SplitMix64:
    """Deterministic stream of 64-bit values from a 64-bit seed.

    Args:
        seed: Initial state. Reduced modulo 2^64, so negative or oversized
            integers are accepted.

    Example:
        rng = SplitMix64(seed=42)
        coin = rng.next() & 1
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int = 0):
        self._state = seed & MASK64

    @property
    def state(self) -> int:
        """Current internal state word."""
        return self._state

    def next(self) -> int:
        """Advance the state and return the next 64-bit value."""
        self._state = (self._state + _GOLDEN_GAMMA) & MASK64
        z = self._state
        z = ((z ^ (z >> 30)) * _MIX_1) & MASK64
        z = ((z ^ (z >> 27)) * _MIX_2) & MASK64
        return z ^ (z >> 31)

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()

    def __repr__(self) -> str:
        return f"SplitMix64(state=0x{self._state:016x})"
