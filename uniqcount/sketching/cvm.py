"""CVM sampling sketch for distinct-count estimation.

The CVM algorithm keeps a bounded set of stream items, each retained with
probability p = 2^-level. Every arriving item is first removed from the set
and then re-added with probability p. When the set reaches capacity, each
member survives a fair coin flip and p is halved. If the set is still full
after thinning, the run fails and produces no estimate.

Key properties:
- Space: O(capacity) items
- Update: O(1) amortized, O(capacity log capacity) on a thinning pass
- Estimate: |sample| * 2^level
- Guarantee: (epsilon, delta) accuracy when capacity is chosen with
  uniqcount.threshold.ThresholdConfig

Reference:
    Chakraborty, Vinodchandran, Meel. "Distinct Elements in Streams:
    An Algorithm for the (Text) Book" (2022), Algorithm 1
"""

from __future__ import annotations

import sys
from typing import Generic, TypeVar

from uniqcount.errors import SketchFailedError
from uniqcount.sketching.base import CardinalitySketch
from uniqcount.sketching.splitmix import MASK64, SplitMix64

T = TypeVar("T")


def sampling_mask(level: int) -> int:
    """Bit mask whose all-zero test succeeds with probability 2^-level.

    Levels above 63 cannot be expressed in 64 bits; they use the all-ones
    mask, which leaves a 2^-64 chance of re-adding an item.
    """
    if level > 63:
        return MASK64
    return (1 << level) - 1


class CVMSketch(CardinalitySketch, Generic[T]):
    """Bounded-memory distinct-count estimator.

    Items must be hashable and mutually orderable: thinning visits the
    sample in sorted order so random draws are consumed in a sequence that
    depends only on the values present.

    Args:
        capacity: Sample size that triggers a thinning pass. Must be > 0.
        seed: Seed for a private SplitMix64 generator.
        rng: Generator to draw from instead of building one from ``seed``.

    Example:
        sketch = CVMSketch[int](capacity=1000, seed=7)
        for token in tokens:
            if not sketch.consume(token):
                break
        if not sketch.failed:
            print(sketch.estimate())
    """

    def __init__(self, capacity: int, seed: int | None = None, rng: SplitMix64 | None = None):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if rng is not None and seed is not None:
            raise ValueError("pass either seed or rng, not both")

        self._capacity = capacity
        self._rng = rng if rng is not None else SplitMix64(seed if seed is not None else 0)
        self._sample: set[T] = set()
        self._level = 0
        self._scale = 1.0
        self._mask = 0
        self._failed = False
        self._total_count = 0

    @property
    def capacity(self) -> int:
        """Sample size that triggers thinning."""
        return self._capacity

    @property
    def level(self) -> int:
        """Current level k; items are retained with probability 2^-k."""
        return self._level

    @property
    def scale(self) -> float:
        """2^level, the weight of each retained item."""
        return self._scale

    @property
    def failed(self) -> bool:
        """Whether the sketch has hit its failure outcome."""
        return self._failed

    @property
    def sample_size(self) -> int:
        return len(self._sample)

    def sample(self) -> list[T]:
        """Sorted copy of the retained items."""
        return sorted(self._sample)

    def consume(self, item: T) -> bool:
        """Process one stream item.

        Returns:
            True to continue, False when the sample is still full after
            thinning. A sketch that returned False accepts no more items.

        Raises:
            SketchFailedError: If the sketch has already failed.
        """
        if self._failed:
            raise SketchFailedError("sketch has failed and accepts no more items")

        self._total_count += 1
        sample = self._sample
        sample.discard(item)

        if self._mask == 0 or (self._rng.next() & self._mask) == 0:
            sample.add(item)

        if len(sample) >= self._capacity:
            self._thin()
            if len(self._sample) >= self._capacity:
                self._failed = True
                return False

        return True

    def _thin(self) -> None:
        """Keep each sampled item with probability 1/2 and halve p."""
        rng = self._rng
        self._sample = {element for element in sorted(self._sample) if rng.next() & 1}
        self._level += 1
        self._scale *= 2
        self._mask = sampling_mask(self._level)

    def add(self, item: T, count: int = 1) -> None:
        """Consume ``item`` ``count`` times in a row.

        Raises:
            ValueError: If count is negative.
            SketchFailedError: If the sketch fails or had already failed.
        """
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        for _ in range(count):
            if not self.consume(item):
                raise SketchFailedError(
                    f"sample still full after thinning at level {self._level}"
                )

    def estimate(self) -> float:
        """Estimated distinct count, |sample| * 2^level.

        Raises:
            SketchFailedError: If the sketch has failed.
        """
        if self._failed:
            raise SketchFailedError("failed sketch has no estimate")
        return len(self._sample) * self._scale

    @property
    def memory_bytes(self) -> int:
        return sys.getsizeof(self._sample) + sys.getsizeof(self)

    @property
    def item_count(self) -> int:
        """Stream items consumed, counting repeats."""
        return self._total_count

    def clear(self) -> None:
        """Reset the sample and level. The generator keeps its position."""
        self._sample = set()
        self._level = 0
        self._scale = 1.0
        self._mask = 0
        self._failed = False
        self._total_count = 0

    def __repr__(self) -> str:
        return (
            f"CVMSketch(capacity={self._capacity}, "
            f"level={self._level}, "
            f"sampled={len(self._sample)}, "
            f"failed={self._failed})"
        )
