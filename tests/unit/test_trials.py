"""Tests for the concurrent trial harness."""

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from uniqcount.errors import ConfigurationError, InternalConsistencyError
from uniqcount.experiment import trials as trials_module
from uniqcount.experiment import SEED_STRIDE, run_single_trial, run_trials, trial_seed
from uniqcount.sketching.splitmix import MASK64


@pytest.fixture
def stream():
    rand = random.Random(11)
    tokens = tuple(rand.randrange(2_000) for _ in range(8_000))
    return tokens, len(set(tokens))


def outcomes(results):
    return [(r.failed, r.estimate) for r in results]


class TestTrialSeed:

    def test_seed_uses_one_based_trial_number(self):
        assert trial_seed(42, 1) == 42 + SEED_STRIDE
        assert trial_seed(0, 3) == 3 * SEED_STRIDE

    def test_seeds_wrap_to_64_bits(self):
        assert trial_seed(MASK64, 1) == SEED_STRIDE - 1

    def test_seeds_are_distinct(self):
        seeds = {trial_seed(7, i) for i in range(1, 1_001)}
        assert len(seeds) == 1_000


class TestRunSingleTrial:

    def test_exact_when_capacity_is_large(self):
        result = run_single_trial([3, 1, 3, 2], exact_distinct=3, capacity=100, seed=5)

        assert not result.failed
        assert result.estimate == 3
        assert result.relative_error == 0
        assert result.elapsed_seconds >= 0

    def test_capacity_one_fails_eventually(self):
        """With capacity 1 the sample is full after every re-add, so some seed fails."""
        tokens = list(range(500))
        results = [run_single_trial(tokens, 500, capacity=1, seed=s) for s in range(10)]

        assert any(r.failed for r in results)
        assert all(r.estimate is None for r in results if r.failed)


class TestRunTrials:

    def test_returns_one_result_per_trial(self, stream):
        tokens, exact = stream
        results = run_trials(tokens, exact, capacity=200, trial_count=12, base_seed=42)

        assert len(results) == 12
        assert all(r.exact == exact for r in results)

    def test_results_are_in_trial_order(self, stream):
        tokens, exact = stream
        results = run_trials(tokens, exact, capacity=200, trial_count=8, base_seed=9, max_workers=4)

        expected = [
            run_single_trial(tokens, exact, 200, trial_seed(9, i)) for i in range(1, 9)
        ]
        assert outcomes(results) == outcomes(expected)

    def test_same_inputs_same_results(self, stream):
        tokens, exact = stream
        first = run_trials(tokens, exact, capacity=150, trial_count=10, base_seed=1)
        second = run_trials(tokens, exact, capacity=150, trial_count=10, base_seed=1)

        assert outcomes(first) == outcomes(second)

    def test_worker_count_does_not_change_results(self, stream):
        tokens, exact = stream
        serial = run_trials(tokens, exact, capacity=150, trial_count=10, base_seed=3, max_workers=1)
        parallel = run_trials(tokens, exact, capacity=150, trial_count=10, base_seed=3, max_workers=8)

        assert outcomes(serial) == outcomes(parallel)

    def test_process_executor_matches_threads(self):
        tokens = tuple(i % 300 for i in range(3_000))
        threads = run_trials(tokens, 300, capacity=50, trial_count=4, base_seed=5)
        processes = run_trials(
            tokens, 300, capacity=50, trial_count=4, base_seed=5,
            max_workers=2, executor="process",
        )

        assert outcomes(threads) == outcomes(processes)

    def test_process_pool_receives_tokens_once_per_worker(self, stream, monkeypatch):
        """Tokens travel through the pool initializer, never with each task."""
        tokens, exact = stream
        submitted = []
        initialized = []

        class RecordingPool(ThreadPoolExecutor):
            def __init__(self, max_workers=None, initializer=None, initargs=()):
                initialized.append(initargs)
                super().__init__(max_workers=max_workers, initializer=initializer, initargs=initargs)

            def submit(self, fn, *args, **kwargs):
                submitted.append(args)
                return super().submit(fn, *args, **kwargs)

        monkeypatch.setattr(trials_module, "ProcessPoolExecutor", RecordingPool)
        monkeypatch.setattr(trials_module, "_worker_tokens", ())

        results = run_trials(
            tokens, exact, capacity=150, trial_count=6, base_seed=4,
            max_workers=2, executor="process",
        )

        assert initialized == [(tokens,)]
        assert len(submitted) == 6
        assert all(tokens not in args for args in submitted)
        expected = run_trials(tokens, exact, capacity=150, trial_count=6, base_seed=4)
        assert outcomes(results) == outcomes(expected)

    def test_different_seeds_give_different_results(self, stream):
        tokens, exact = stream
        a = run_trials(tokens, exact, capacity=100, trial_count=5, base_seed=1)
        b = run_trials(tokens, exact, capacity=100, trial_count=5, base_seed=2)

        assert outcomes(a) != outcomes(b)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"trial_count": 0}, "--trials"),
            ({"base_seed": -1}, "--seed"),
            ({"capacity": 0}, "capacity"),
            ({"max_workers": 0}, "--workers"),
            ({"executor": "fiber"}, "executor"),
        ],
    )
    def test_rejects_bad_configuration(self, kwargs, message):
        params = {
            "tokens": (1, 2, 3),
            "exact_distinct": 3,
            "capacity": 10,
            "trial_count": 2,
            "base_seed": 0,
        }
        params.update(kwargs)

        with pytest.raises(ConfigurationError, match=message):
            run_trials(**params)

    def test_missing_slot_is_fatal(self, monkeypatch):
        monkeypatch.setattr(trials_module, "as_completed", lambda futures: iter(()))

        with pytest.raises(InternalConsistencyError, match="missing trial result at index 0"):
            run_trials((1, 2, 3), 3, capacity=10, trial_count=3, base_seed=0)
