"""Independent, seeded CVM trials over a shared token stream.

Every trial builds its own generator and sketch from a seed derived from
the base seed and the trial number, then runs over the whole token
sequence. Trials run on a concurrent.futures pool. Each future writes into
the slot for its trial index, so the returned list is ordered by trial
number no matter which trial finished first.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Literal

from uniqcount.errors import ConfigurationError, InternalConsistencyError
from uniqcount.instrumentation.stats import FAILED, Estimated, TrialResult
from uniqcount.sketching.cvm import CVMSketch
from uniqcount.sketching.splitmix import MASK64, SplitMix64

logger = logging.getLogger(__name__)

SEED_STRIDE = 0x94D049BB

ExecutorKind = Literal["thread", "process"]


def trial_seed(base_seed: int, trial_number: int) -> int:
    """Seed for the 1-based ``trial_number`` of a run started from ``base_seed``."""
    return (base_seed + trial_number * SEED_STRIDE) & MASK64


def run_single_trial(
    tokens: Sequence[int],
    exact_distinct: int,
    capacity: int,
    seed: int,
) -> TrialResult:
    """Run one sketch over ``tokens`` and time it.

    Stops at the first failed consume; the remaining tokens cannot change
    the outcome.
    """
    start = time.perf_counter()

    sketch = CVMSketch[int](capacity, rng=SplitMix64(seed))
    failed = False
    for token in tokens:
        if not sketch.consume(token):
            failed = True
            break

    elapsed = time.perf_counter() - start
    outcome = FAILED if failed else Estimated(sketch.estimate())
    return TrialResult(exact=exact_distinct, outcome=outcome, elapsed_seconds=elapsed)


# Token stream of the current worker process, set once by the pool initializer.
_worker_tokens: Sequence[int] = ()


def _init_worker(tokens: Sequence[int]) -> None:
    global _worker_tokens
    _worker_tokens = tokens


def _run_worker_trial(exact_distinct: int, capacity: int, seed: int) -> TrialResult:
    """Process-pool task: run a trial over the tokens installed by _init_worker."""
    return run_single_trial(_worker_tokens, exact_distinct, capacity, seed)


def _make_executor(
    kind: ExecutorKind,
    max_workers: int | None,
    tokens: Sequence[int],
) -> Executor:
    if kind == "thread":
        return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="uniqcount-trial")
    if kind == "process":
        return ProcessPoolExecutor(
            max_workers=max_workers, initializer=_init_worker, initargs=(tokens,)
        )
    raise ConfigurationError(f"executor must be 'thread' or 'process', got {kind!r}")


def run_trials(
    tokens: Sequence[int],
    exact_distinct: int,
    capacity: int,
    trial_count: int,
    base_seed: int,
    max_workers: int | None = None,
    executor: ExecutorKind = "thread",
) -> list[TrialResult]:
    """Run ``trial_count`` independent trials and return them in trial order.

    Args:
        tokens: Token ids, shared read-only by every trial.
        exact_distinct: True distinct count, copied into each result.
        capacity: Sketch capacity for every trial.
        trial_count: Number of trials. Must be > 0.
        base_seed: Seed the per-trial seeds derive from. Must be >= 0.
        max_workers: Pool size; None lets concurrent.futures decide.
        executor: "thread" (default) or "process". Process pools send the
            token sequence once to each worker process, not once per trial.

    Returns:
        One TrialResult per trial, index i holding trial i + 1.

    Raises:
        ConfigurationError: On invalid counts, seeds, capacity or executor.
        InternalConsistencyError: If a trial slot is still empty once every
            future has completed.
    """
    if trial_count <= 0:
        raise ConfigurationError("--trials must be > 0")
    if base_seed < 0:
        raise ConfigurationError("--seed must be >= 0")
    if capacity <= 0:
        raise ConfigurationError("capacity must be > 0")
    if max_workers is not None and max_workers <= 0:
        raise ConfigurationError("--workers must be > 0")

    pool = _make_executor(executor, max_workers, tokens)
    logger.info(
        "Running %d trials over %d tokens (capacity=%d, seed=%d, executor=%s)",
        trial_count, len(tokens), capacity, base_seed, executor,
    )

    slots: list[TrialResult | None] = [None] * trial_count
    with pool:
        futures = {}
        for index in range(trial_count):
            seed = trial_seed(base_seed, index + 1)
            if executor == "process":
                future = pool.submit(_run_worker_trial, exact_distinct, capacity, seed)
            else:
                future = pool.submit(run_single_trial, tokens, exact_distinct, capacity, seed)
            futures[future] = index
        for future in as_completed(futures):
            index = futures[future]
            result = future.result()
            slots[index] = result
            logger.debug(
                "Trial %d finished: estimate=%s elapsed=%.6fs",
                index + 1, result.estimate, result.elapsed_seconds,
            )

    results: list[TrialResult] = []
    for index, result in enumerate(slots):
        if result is None:
            raise InternalConsistencyError(f"missing trial result at index {index}")
        results.append(result)

    failures = sum(1 for r in results if r.failed)
    logger.info("Completed %d trials (%d failed)", trial_count, failures)
    return results
