"""Streaming sketches for distinct-count estimation.

Quick Reference:
    CVMSketch: CVM sampling estimator for the number of distinct items
    SplitMix64: Deterministic 64-bit generator that drives the sketch

Example:
    from uniqcount.sketching import CVMSketch

    sketch = CVMSketch[int](capacity=1000, seed=42)
    for token in tokens:
        if not sketch.consume(token):
            break
    print(f"~{sketch.cardinality()} distinct tokens")
"""

from uniqcount.sketching.base import CardinalitySketch, Sketch
from uniqcount.sketching.cvm import CVMSketch, sampling_mask
from uniqcount.sketching.splitmix import SplitMix64

__all__ = [
    "CVMSketch",
    "CardinalitySketch",
    "Sketch",
    "SplitMix64",
    "sampling_mask",
]
