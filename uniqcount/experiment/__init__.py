"""Multi-trial accuracy experiments for the CVM sketch."""

from uniqcount.experiment.trials import (
    SEED_STRIDE,
    run_single_trial,
    run_trials,
    trial_seed,
)

__all__ = [
    "SEED_STRIDE",
    "run_single_trial",
    "run_trials",
    "trial_seed",
]
