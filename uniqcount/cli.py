"""Command-line entry point.

Reads a UTF-8 text file, runs independent CVM trials over its words and
prints the median estimate, or full tables with ``--report``.

Usage:
    uniqcount --path corpus.txt
    uniqcount --path corpus.txt --trials 100 --epsilon 0.1 --delta 0.05 --report
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from uniqcount.errors import ConfigurationError, InputError
from uniqcount.experiment.trials import run_trials
from uniqcount.instrumentation.stats import Aggregate
from uniqcount.logging_config import configure_from_env
from uniqcount.reporting import (
    format_run_info,
    format_summary,
    format_trials,
    plot_relative_errors,
    round_half_up,
)
from uniqcount.text import load_token_data
from uniqcount.threshold import ThresholdConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uniqcount",
        description="Run the distinct-count estimator on a UTF-8 text file.",
    )
    parser.add_argument("--path", required=True, help="Path to UTF-8 text file.")
    parser.add_argument("--trials", type=int, default=20, help="Number of independent trials.")
    parser.add_argument("--seed", type=int, default=42, help="Base RNG seed.")
    parser.add_argument(
        "--report", action="store_true",
        help="Show detailed tables. Default output is just the estimate.",
    )
    parser.add_argument(
        "--memory", type=int, default=None,
        help="Fixed sample cap (threshold). Default is 1000 when epsilon/delta are not set.",
    )
    parser.add_argument("--epsilon", type=float, default=None,
                        help="Target relative error bound (0 < epsilon < 1).")
    parser.add_argument("--delta", type=float, default=None,
                        help="Failure probability (0 < delta < 1).")
    parser.add_argument("--workers", type=int, default=None, help="Worker pool size.")
    parser.add_argument("--executor", choices=["thread", "process"], default="thread",
                        help="Run trials on threads or processes. Process workers "
                             "receive the tokens once at startup.")
    parser.add_argument("--plot", default=None,
                        help="Write a relative-error histogram PNG to this path.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_from_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.trials <= 0:
        parser.error("--trials must be > 0")
    if args.seed < 0:
        parser.error("--seed must be >= 0")

    try:
        token_data = load_token_data(args.path)
    except InputError as exc:
        parser.error(str(exc))

    if not token_data.ids:
        parser.error(f"no tokens found in {args.path}")

    thresholds = ThresholdConfig(memory=args.memory, epsilon=args.epsilon, delta=args.delta)
    try:
        capacity = thresholds.resolve(len(token_data.ids))
        results = run_trials(
            token_data.ids,
            token_data.exact_distinct,
            capacity,
            args.trials,
            args.seed,
            max_workers=args.workers,
            executor=args.executor,
        )
    except ConfigurationError as exc:
        parser.error(str(exc))

    stats = Aggregate()
    stats.extend(results)

    if args.report:
        print(format_run_info(
            path=args.path,
            tokens=len(token_data.ids),
            exact_distinct=token_data.exact_distinct,
            trials=args.trials,
            threshold=capacity,
            seed=args.seed,
        ))
        print(format_trials(stats.results))
        print(format_summary(stats, epsilon=thresholds.report_epsilon))
    elif stats.median_estimate is not None:
        print(round_half_up(stats.median_estimate))
    else:
        print("bottom")

    if args.plot:
        saved = plot_relative_errors(stats, args.plot, epsilon=thresholds.report_epsilon)
        logger.info("Saved relative-error plot to %s", saved)

    return 0
