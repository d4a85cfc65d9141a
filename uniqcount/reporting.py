"""Human-readable output for trial runs.

Tables are plain ASCII with ``+---+`` borders. Numbers are shown with three
decimals; percentages are multiplied by 100 first.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from pathlib import Path

from uniqcount.instrumentation.stats import Aggregate, TrialResult


def format_number(value: float) -> str:
    return f"{value:.3f}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def render_table(
    title: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    right_aligned: Iterable[int] = (),
) -> str:
    """Render a bordered ASCII table followed by a blank line."""
    rows = [list(row) for row in rows]
    right = set(right_aligned)
    widths = [len(h) for h in headers]
    for row in rows:
        for i in range(len(headers)):
            value = row[i] if i < len(row) else ""
            widths[i] = max(widths[i], len(value))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(columns: Sequence[str]) -> str:
        cells = []
        for i, width in enumerate(widths):
            value = columns[i] if i < len(columns) else ""
            cells.append(f" {value:>{width}} " if i in right else f" {value:<{width}} ")
        return "|" + "|".join(cells) + "|"

    out = [f"{title}:", border, line(headers), border]
    out.extend(line(row) for row in rows)
    out.append(border)
    out.append("")
    return "\n".join(out)


def format_run_info(
    path: str,
    tokens: int,
    exact_distinct: int,
    trials: int,
    threshold: int,
    seed: int,
) -> str:
    rows = [
        ["path", str(path)],
        ["tokens", str(tokens)],
        ["exact_distinct", str(exact_distinct)],
        ["trials", str(trials)],
        ["threshold", str(threshold)],
        ["seed", str(seed)],
    ]
    return render_table("Run", ["Field", "Value"], rows, right_aligned=[1])


def format_trials(results: Sequence[TrialResult]) -> str:
    """One row per trial, numbered from 1."""
    rows = []
    for number, result in enumerate(results, start=1):
        estimate = result.estimate
        rel = result.relative_error
        rows.append([
            str(number),
            str(result.exact),
            "bottom" if estimate is None else str(round_half_up(estimate)),
            "n/a" if rel is None else f"{format_number(rel * 100)}%",
            format_number(result.elapsed_seconds * 1000),
            "fail" if result.failed else "ok",
        ])
    return render_table(
        "Trials",
        ["Trial", "Exact", "Estimate", "RelError", "TimeMs", "Status"],
        rows,
        right_aligned=[0, 1, 2, 3, 4],
    )


def format_summary(stats: Aggregate, epsilon: float | None = None) -> str:
    rows = [
        ["trials", str(stats.total_trials)],
        ["failures(bottom)", str(stats.failure_count)],
        ["failure_rate", f"{format_number(stats.failure_rate * 100)}%"],
    ]

    if math.isfinite(stats.mean_relative_error):
        rows.append(["mean_relative_error", f"{format_number(stats.mean_relative_error * 100)}%"])
        rows.append(["max_relative_error", f"{format_number(stats.max_relative_error * 100)}%"])
    else:
        rows.append(["mean_relative_error", "n/a"])
        rows.append(["max_relative_error", "n/a"])

    rows.append(["mean_trial_time", f"{format_number(stats.mean_elapsed_seconds * 1000)} ms"])

    if epsilon is not None:
        rows.append([
            f"fraction_within_+/-{format_number(epsilon * 100)}%",
            f"{format_number(stats.in_range_rate(epsilon) * 100)}%",
        ])

    return render_table("Summary", ["Metric", "Value"], rows, right_aligned=[1])


def plot_relative_errors(stats: Aggregate, path: str | Path, epsilon: float | None = None) -> Path:
    """Save a histogram of relative errors of the successful trials.

    Returns:
        The path the PNG was written to.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    errors = [
        r.relative_error * 100
        for r in stats.results
        if r.relative_error is not None and math.isfinite(r.relative_error)
    ]

    fig, ax = plt.subplots(figsize=(8, 5))
    if errors:
        ax.hist(errors, bins=min(30, max(5, len(errors) // 2)), color="steelblue", alpha=0.8)
    if epsilon is not None:
        ax.axvline(epsilon * 100, color="red", linestyle="--", label=f"epsilon = {epsilon * 100:.1f}%")
        ax.legend()
    ax.set_xlabel("Relative error (%)")
    ax.set_ylabel("Trials")
    ax.set_title(
        f"CVM relative error ({stats.total_trials} trials, {stats.failure_count} failed)"
    )
    ax.grid(True, alpha=0.2)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
