"""Base protocols for distinct-count sketches.

A sketch consumes a stream one item at a time and answers a question about
the stream from bounded memory. Every sketch here is driven by an explicit,
seedable generator, so the same seed over the same stream always produces
the same answer.

- Sketch: common operations (add, item_count, memory_bytes, clear)
- CardinalitySketch: sketches that estimate the number of distinct items
"""

from abc import ABC, abstractmethod
from typing import TypeVar

T = TypeVar("T")


class Sketch(ABC):
    """Base protocol for all streaming sketches.

    Sketches process a stream of items and provide approximate answers to
    queries about it. Implementations accept a ``seed`` for reproducibility.
    """

    @abstractmethod
    def add(self, item: T, count: int = 1) -> None:
        """Feed an item to the sketch.

        Args:
            item: The item to add.
            count: Number of consecutive occurrences of the item (default 1).
        """

    @property
    @abstractmethod
    def memory_bytes(self) -> int:
        """Approximate memory footprint of the sketch data structures."""

    @property
    @abstractmethod
    def item_count(self) -> int:
        """Number of stream items consumed so far."""

    @abstractmethod
    def clear(self) -> None:
        """Reset the sketch to its initial empty state."""


class CardinalitySketch(Sketch):
    """Protocol for sketches that estimate cardinality (distinct count)."""

    @abstractmethod
    def estimate(self) -> float:
        """Unrounded estimate of the number of distinct items."""

    def cardinality(self) -> int:
        """Estimated distinct count rounded to the nearest integer."""
        return int(self.estimate() + 0.5)
