"""Sketch capacity selection.

The capacity either comes straight from the caller (a memory cap) or is
derived from an accuracy target. For relative error epsilon with failure
probability delta over a stream of m items, the CVM paper uses

    capacity = ceil((12 / epsilon^2) * log2(8m / delta))
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from uniqcount.errors import ConfigurationError

DEFAULT_CAPACITY = 1000


def capacity_for_accuracy(epsilon: float, delta: float, stream_length: int) -> int:
    """Capacity that gives (epsilon, delta) accuracy over stream_length items.

    Raises:
        ConfigurationError: If epsilon or delta is outside (0, 1), or the
            stream length is not positive.
    """
    if stream_length <= 0:
        raise ConfigurationError("stream length must be > 0")
    if not 0 < epsilon < 1:
        raise ConfigurationError("--epsilon must be between 0 and 1")
    if not 0 < delta < 1:
        raise ConfigurationError("--delta must be between 0 and 1")

    raw = (12.0 / (epsilon * epsilon)) * math.log2((8.0 * stream_length) / delta)
    return max(1, math.ceil(raw))


@dataclass(frozen=True)
class ThresholdConfig:
    """User intent for the sketch capacity.

    Set ``memory`` for a fixed cap, or both ``epsilon`` and ``delta`` for an
    accuracy target. With nothing set the capacity is DEFAULT_CAPACITY.
    """

    memory: int | None = None
    epsilon: float | None = None
    delta: float | None = None

    def resolve(self, stream_length: int) -> int:
        """Resolve the capacity for a stream of ``stream_length`` tokens.

        Raises:
            ConfigurationError: On a non-positive stream length, a mix of
                memory and accuracy options, only one of epsilon/delta,
                or out-of-range values.
        """
        if stream_length <= 0:
            raise ConfigurationError("stream length must be > 0")

        if self.epsilon is not None or self.delta is not None:
            if self.memory is not None:
                raise ConfigurationError("choose either --memory or (--epsilon and --delta)")
            if self.epsilon is None or self.delta is None:
                raise ConfigurationError("use both --epsilon and --delta")
            return capacity_for_accuracy(self.epsilon, self.delta, stream_length)

        capacity = DEFAULT_CAPACITY if self.memory is None else self.memory
        if capacity <= 0:
            raise ConfigurationError("--memory must be > 0")
        return capacity

    @property
    def report_epsilon(self) -> float | None:
        """Epsilon to use for the in-range summary row, if one was given."""
        return self.epsilon
