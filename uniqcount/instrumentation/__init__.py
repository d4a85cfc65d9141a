"""Trial results and summary statistics."""

from uniqcount.instrumentation.stats import (
    FAILED,
    Aggregate,
    Estimated,
    Failed,
    TrialOutcome,
    TrialResult,
)

__all__ = [
    "FAILED",
    "Aggregate",
    "Estimated",
    "Failed",
    "TrialOutcome",
    "TrialResult",
]
