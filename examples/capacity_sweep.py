"""Accuracy of the CVM sketch as its capacity grows.

Builds a synthetic Zipf-distributed word stream, runs a batch of seeded
trials at several capacities and reports how the median estimate, the mean
relative error and the failure count move. Smaller capacities thin more
often and drift further from the exact count.

## Architecture

```
  synthetic words ──> tokenize_text ──> run_trials(capacity=c) ──> Aggregate
                                         (one batch per capacity)
```

Run:
    python examples/capacity_sweep.py --capacities 50 100 400 1600
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path

from uniqcount import Aggregate, run_trials, tokenize_text


@dataclass
class SweepResult:
    capacity: int
    stats: Aggregate


def build_corpus(vocabulary: int, length: int, seed: int) -> str:
    rand = random.Random(seed)
    words = [f"word{i}" for i in range(vocabulary)]
    weights = [1.0 / (rank + 1) for rank in range(vocabulary)]
    return " ".join(rand.choices(words, weights=weights, k=length))


def run_sweep(capacities: list[int], trials: int, seed: int, text: str) -> tuple[int, list[SweepResult]]:
    data = tokenize_text(text)
    results = []
    for capacity in capacities:
        stats = Aggregate()
        stats.extend(run_trials(data.ids, data.exact_distinct, capacity, trials, seed))
        results.append(SweepResult(capacity=capacity, stats=stats))
    return data.exact_distinct, results


def print_summary(exact: int, results: list[SweepResult]) -> None:
    print("\n" + "=" * 60)
    print(f"CAPACITY SWEEP (exact distinct = {exact})")
    print("=" * 60)
    print(f"  {'capacity':>9s} {'median':>10s} {'mean err':>9s} {'max err':>9s} {'failed':>7s}")
    print(f"  {'-' * 48}")
    for r in results:
        s = r.stats
        median = "bottom" if s.median_estimate is None else f"{s.median_estimate:.0f}"
        print(
            f"  {r.capacity:>9d} {median:>10s} "
            f"{s.mean_relative_error * 100:>8.2f}% {s.max_relative_error * 100:>8.2f}% "
            f"{s.failure_count:>7d}"
        )
    print("\n" + "=" * 60)


def visualize_results(results: list[SweepResult], output_dir: Path) -> None:
    """Plot mean and max relative error against capacity."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    output_dir.mkdir(parents=True, exist_ok=True)

    capacities = [r.capacity for r in results]
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(capacities, [r.stats.mean_relative_error * 100 for r in results], "o-", label="mean")
    ax.plot(capacities, [r.stats.max_relative_error * 100 for r in results], "s--", label="max")
    ax.set_xscale("log")
    ax.set_xlabel("Capacity")
    ax.set_ylabel("Relative error (%)")
    ax.set_title("CVM relative error vs capacity")
    ax.grid(True, alpha=0.2)
    ax.legend()
    fig.tight_layout()

    path = output_dir / "capacity_sweep.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    print(f"Saved: {path}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="CVM capacity sweep")
    parser.add_argument("--capacities", type=int, nargs="+", default=[50, 100, 200, 400, 800, 1600])
    parser.add_argument("--vocabulary", type=int, default=20_000)
    parser.add_argument("--length", type=int, default=200_000)
    parser.add_argument("--trials", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", type=str, default="output/capacity_sweep")
    parser.add_argument("--no-viz", action="store_true")
    args = parser.parse_args()

    print("Building corpus...")
    text = build_corpus(args.vocabulary, args.length, args.seed)

    print("Running sweep...")
    exact, results = run_sweep(args.capacities, args.trials, args.seed, text)
    print_summary(exact, results)

    if not args.no_viz:
        visualize_results(results, Path(args.output))
