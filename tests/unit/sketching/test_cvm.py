"""Tests for the CVM distinct-count sketch."""

import random

import pytest

from uniqcount.errors import SketchFailedError
from uniqcount.sketching import CVMSketch, SplitMix64, sampling_mask
from uniqcount.sketching.splitmix import MASK64


class ConstantRng:
    """Generator stand-in that always returns the same draw."""

    def __init__(self, value: int):
        self.value = value
        self.draws = 0

    def next(self) -> int:
        self.draws += 1
        return self.value


class TestCVMSketchCreation:
    """Tests for sketch construction."""

    def test_starts_empty_at_level_zero(self):
        sketch = CVMSketch[int](capacity=10, seed=1)

        assert sketch.capacity == 10
        assert sketch.level == 0
        assert sketch.scale == 1.0
        assert sketch.sample_size == 0
        assert sketch.estimate() == 0
        assert not sketch.failed

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="must be positive"):
            CVMSketch[int](capacity=0)

    def test_rejects_seed_and_rng_together(self):
        with pytest.raises(ValueError, match="either seed or rng"):
            CVMSketch[int](capacity=5, seed=1, rng=SplitMix64(1))


class TestCVMSketchConsume:
    """Tests for the per-item sampling rule."""

    def test_exact_when_capacity_exceeds_distinct_count(self):
        """No thinning happens, so every seed gives the exact answer."""
        tokens = [i % 37 for i in range(2_000)]

        for seed in range(20):
            sketch = CVMSketch[int](capacity=38, seed=seed)
            for token in tokens:
                assert sketch.consume(token)
            assert sketch.level == 0
            assert sketch.estimate() == 37

    def test_level_zero_draws_no_randomness(self):
        rng = ConstantRng(MASK64)
        sketch = CVMSketch[int](capacity=100, rng=rng)

        for token in [1, 2, 2, 3, 1]:
            sketch.consume(token)

        assert rng.draws == 0
        assert sketch.sample() == [1, 2, 3]

    def test_invariants_hold_after_every_consume(self):
        sketch = CVMSketch[int](capacity=100, seed=42)
        rand = random.Random(7)
        previous_level = 0

        for _ in range(20_000):
            assert sketch.consume(rand.randrange(5_000))
            assert sketch.sample_size < sketch.capacity
            assert sketch.estimate() == sketch.sample_size * 2 ** sketch.level
            assert sketch.scale == 2.0 ** sketch.level
            assert sketch.level >= previous_level
            previous_level = sketch.level

        assert sketch.level > 0

    def test_thinning_drops_items_on_zero_bits(self):
        """A draw with a clear low bit discards the element."""
        sketch = CVMSketch[int](capacity=3, rng=ConstantRng(0))

        assert sketch.consume(1)
        assert sketch.consume(2)
        assert sketch.consume(3)

        assert sketch.level == 1
        assert sketch.sample_size == 0
        assert sketch.estimate() == 0

    def test_fails_when_thinning_keeps_everything(self):
        sketch = CVMSketch[int](capacity=2, rng=ConstantRng(MASK64))

        assert sketch.consume(10)
        assert not sketch.consume(20)

        assert sketch.failed
        assert sketch.level == 1
        with pytest.raises(SketchFailedError):
            sketch.estimate()
        with pytest.raises(SketchFailedError):
            sketch.consume(30)

    def test_thinning_order_ignores_insertion_order(self):
        """Thinning visits values in sorted order, so arrival order does not matter."""
        first = CVMSketch[int](capacity=6, seed=99)
        second = CVMSketch[int](capacity=6, seed=99)

        for token in [50, 3, 17, 8, 42, 1]:
            first.consume(token)
        for token in [1, 42, 8, 17, 3, 50]:
            second.consume(token)

        assert first.level == second.level == 1
        assert first.sample() == second.sample()

    def test_same_seed_same_result(self):
        rand = random.Random(3)
        tokens = [rand.randrange(3_000) for _ in range(10_000)]

        estimates = []
        for _ in range(2):
            sketch = CVMSketch[int](capacity=200, seed=1234)
            for token in tokens:
                sketch.consume(token)
            estimates.append((sketch.level, sketch.sample()))

        assert estimates[0] == estimates[1]

    def test_add_alias_repeats_item(self):
        sketch = CVMSketch[int](capacity=10, seed=0)
        sketch.add(5, count=3)

        assert sketch.item_count == 3
        assert sketch.sample() == [5]

    def test_add_raises_on_failure(self):
        sketch = CVMSketch[int](capacity=1, rng=ConstantRng(MASK64))
        with pytest.raises(SketchFailedError, match="still full"):
            sketch.add(7)

    def test_add_rejects_negative_count(self):
        sketch = CVMSketch[int](capacity=10, seed=0)
        with pytest.raises(ValueError, match="non-negative"):
            sketch.add(5, count=-1)


class TestSamplingMask:
    """Tests for the Bernoulli bit mask."""

    def test_level_zero_always_samples(self):
        assert sampling_mask(0) == 0

    def test_mask_has_level_low_bits(self):
        assert sampling_mask(1) == 0b1
        assert sampling_mask(5) == 0b11111
        assert sampling_mask(63) == (1 << 63) - 1

    def test_levels_beyond_63_use_all_ones(self):
        """Known approximation: re-add probability is 2^-64, not zero."""
        assert sampling_mask(64) == MASK64
        assert sampling_mask(200) == MASK64

    def test_sketch_keeps_running_past_level_63(self):
        """Zero draws re-add and then thin away every item, raising the level each time."""
        sketch = CVMSketch[int](capacity=1, rng=ConstantRng(0))

        for token in range(70):
            assert sketch.consume(token)

        assert sketch.level == 70
        assert sketch.sample_size == 0
        assert sketch.scale == 2.0 ** 70


class TestCVMSketchClear:
    def test_clear_resets_state(self):
        sketch = CVMSketch[int](capacity=2, rng=ConstantRng(MASK64))
        sketch.consume(1)
        sketch.consume(2)
        assert sketch.failed

        sketch.clear()

        assert not sketch.failed
        assert sketch.level == 0
        assert sketch.sample_size == 0
        assert sketch.item_count == 0

    def test_repr(self):
        sketch = CVMSketch[int](capacity=4, seed=0)
        assert "capacity=4" in repr(sketch)

    def test_cardinality_rounds_estimate(self):
        sketch = CVMSketch[int](capacity=10, seed=0)
        for token in [1, 2, 3]:
            sketch.consume(token)
        assert sketch.cardinality() == 3
        assert sketch.memory_bytes > 0
