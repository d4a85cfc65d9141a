"""Per-trial results and the running summary over a batch of trials.

A trial either produced an estimate or hit the sketch's failure outcome.
The two cases are separate types so a failed trial can never be read as a
zero estimate. Aggregate folds results in one at a time and derives the
summary figures on demand.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass, field
from typing import Any

import pandas as pd


@dataclass(frozen=True, slots=True)
class Estimated:
    """Outcome of a trial that finished with an estimate."""
    value: float


@dataclass(frozen=True, slots=True)
class Failed:
    """Outcome of a trial whose sample stayed full after thinning."""


FAILED = Failed()

TrialOutcome = Estimated | Failed


@dataclass(frozen=True)
class TrialResult:
    """Result of one full pass of a sketch over the token stream."""
    exact: int
    outcome: TrialOutcome
    elapsed_seconds: float

    @property
    def failed(self) -> bool:
        return isinstance(self.outcome, Failed)

    @property
    def estimate(self) -> float | None:
        """Estimated distinct count, or None for a failed trial."""
        if isinstance(self.outcome, Estimated):
            return self.outcome.value
        return None

    @property
    def relative_error(self) -> float | None:
        """|estimate - exact| / exact, or None for a failed trial.

        With exact == 0 the error is 0 for a zero estimate and infinite
        otherwise.
        """
        estimate = self.estimate
        if estimate is None:
            return None
        if self.exact <= 0:
            return 0.0 if estimate == 0 else math.inf
        return abs(estimate - self.exact) / self.exact

    def to_dict(self) -> dict[str, Any]:
        return {
            "exact": self.exact,
            "estimate": self.estimate,
            "relative_error": self.relative_error,
            "elapsed_seconds": self.elapsed_seconds,
            "failed": self.failed,
        }


@dataclass
class Aggregate:
    """Running totals over trial results.

    Owned by a single caller; add() is not safe for concurrent use.
    """
    _results: list[TrialResult] = field(default_factory=list, init=False)
    _failure_count: int = field(default=0, init=False)
    _max_relative_error: float = field(default=math.nan, init=False, repr=False)
    _relative_error_sum: float = field(default=0.0, init=False, repr=False)
    _relative_error_count: int = field(default=0, init=False, repr=False)
    _elapsed_sum_seconds: float = field(default=0.0, init=False, repr=False)

    def add(self, result: TrialResult) -> None:
        """Record one trial and update the running totals."""
        self._results.append(result)
        self._elapsed_sum_seconds += result.elapsed_seconds

        if result.failed:
            self._failure_count += 1

        rel = result.relative_error
        if rel is not None:
            self._relative_error_sum += rel
            self._relative_error_count += 1
            if math.isnan(self._max_relative_error) or rel > self._max_relative_error:
                self._max_relative_error = rel

    def extend(self, results: list[TrialResult]) -> None:
        for result in results:
            self.add(result)

    @property
    def results(self) -> list[TrialResult]:
        """Trial results in the order they were added."""
        return list(self._results)

    @property
    def total_trials(self) -> int:
        return len(self._results)

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def failure_rate(self) -> float:
        """Failed trials over all trials; 0.0 when empty."""
        return self._failure_count / max(1, self.total_trials)

    @property
    def max_relative_error(self) -> float:
        """Largest relative error among successful trials; NaN if none."""
        return self._max_relative_error

    @property
    def mean_relative_error(self) -> float:
        """Mean relative error among successful trials; NaN if none."""
        if self._relative_error_count == 0:
            return math.nan
        return self._relative_error_sum / self._relative_error_count

    @property
    def median_estimate(self) -> float | None:
        """Median estimate over successful trials; None if every trial failed."""
        values = [r.estimate for r in self._results if r.estimate is not None]
        if not values:
            return None
        return float(statistics.median(values))

    @property
    def mean_elapsed_seconds(self) -> float:
        """Mean trial runtime; NaN when no trials were added."""
        if not self._results:
            return math.nan
        return self._elapsed_sum_seconds / len(self._results)

    def in_range_rate(self, epsilon: float) -> float:
        """Fraction of all trials whose relative error is <= epsilon.

        Failed trials count in the denominator but never in the numerator.
        """
        in_range = sum(
            1 for r in self._results
            if r.relative_error is not None and r.relative_error <= epsilon
        )
        return in_range / max(1, self.total_trials)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per trial, indexed by 1-based trial number."""
        frame = pd.DataFrame(
            [r.to_dict() for r in self._results],
            columns=["exact", "estimate", "relative_error", "elapsed_seconds", "failed"],
        )
        frame.index = pd.RangeIndex(1, len(frame) + 1, name="trial")
        return frame

    def to_dict(self) -> dict[str, Any]:
        return {
            "trials": self.total_trials,
            "failures": self.failure_count,
            "failure_rate": self.failure_rate,
            "mean_relative_error": self.mean_relative_error,
            "max_relative_error": self.max_relative_error,
            "median_estimate": self.median_estimate,
            "mean_elapsed_seconds": self.mean_elapsed_seconds,
        }
