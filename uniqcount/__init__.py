"""uniqcount: distinct-count estimation with the CVM sketch.

The package estimates how many distinct words a text contains using the
fixed-memory CVM sampling sketch, and measures the estimator's accuracy by
running many independent, seeded trials over the same token stream.

Logging is silent by default. Enable it with enable_console_logging(),
enable_file_logging(), enable_json_logging() or configure_from_env().
"""

import logging

from uniqcount.errors import (
    ConfigurationError,
    InputError,
    InternalConsistencyError,
    SketchFailedError,
    UniqCountError,
)
from uniqcount.experiment import run_single_trial, run_trials, trial_seed
from uniqcount.instrumentation import FAILED, Aggregate, Estimated, Failed, TrialResult
from uniqcount.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
)
from uniqcount.sketching import CVMSketch, SplitMix64
from uniqcount.text import TokenData, load_token_data, tokenize_text
from uniqcount.threshold import DEFAULT_CAPACITY, ThresholdConfig, capacity_for_accuracy

logging.getLogger("uniqcount").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CAPACITY",
    "FAILED",
    "Aggregate",
    "CVMSketch",
    "ConfigurationError",
    "Estimated",
    "Failed",
    "InputError",
    "InternalConsistencyError",
    "SketchFailedError",
    "SplitMix64",
    "ThresholdConfig",
    "TokenData",
    "TrialResult",
    "UniqCountError",
    "capacity_for_accuracy",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "load_token_data",
    "run_single_trial",
    "run_trials",
    "set_level",
    "tokenize_text",
    "trial_seed",
]
