# Ensure only ASCII characters are used in this script
"""
Summarizes grouped engine runs as a table: for every configuration, metric
and engine, the mean +/- stdev of the plotted value (rate for throughput,
mean duration for latency) across all aligned samples of all its runs.
"""

import pandas as pd

from enginecharts import describe_config, is_throughput
from enginelog import METRICS, RunConfig, WriteError


# --- Configuration ---
SUMMARY_COLUMNS = [
    "writers",
    "readers",
    "size",
    "vary",
    "metric",
    "engine",
    "runs",
    "points",
    "mean",
    "stdev",
    "min",
    "max",
]
GROUP_COLUMNS = ["writers", "readers", "size", "vary", "metric", "engine"]
SUMMARY_WIDTH = 95


def summarize(grouped):
    """
    Builds the summary DataFrame, one row per (configuration, metric,
    engine), in configuration order, then METRICS order, then first-seen
    engine order.
    """
    rows = []
    for config, runs in grouped.items():
        for metric in METRICS:
            for run_index, run in enumerate(runs):
                for values in run.data.get(metric, ()):
                    rows.append(
                        {
                            "writers": config.writers,
                            "readers": config.readers,
                            "size": config.size,
                            "vary": config.vary,
                            "metric": metric,
                            "engine": run.engine,
                            "run": f"{run.source}#{run_index}",
                            "value": values[0],
                        }
                    )

    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    samples = pd.DataFrame(rows)
    summary = (
        samples.groupby(GROUP_COLUMNS, sort=False)
        .agg(
            runs=("run", "nunique"),
            points=("value", "count"),
            mean=("value", "mean"),
            stdev=("value", "std"),
            min=("value", "min"),
            max=("value", "max"),
        )
        .reset_index()
    )
    # A single sample has no spread
    summary["stdev"] = summary["stdev"].fillna(0.0)
    return summary[SUMMARY_COLUMNS]


def format_summary(summary):
    """Renders the summary DataFrame as a fixed-width ASCII table."""
    separator = "-" * SUMMARY_WIDTH
    row_format = "{:<12} | {:<16} | {:>5} | {:>7} | {:<40}"
    lines = [
        "=" * SUMMARY_WIDTH,
        "Storage Engine Benchmark Summary",
        "=" * SUMMARY_WIDTH,
        row_format.format("Metric", "Engine", "Runs", "Points", "Mean +/- Stdev (min..max)"),
        separator,
    ]

    if summary.empty:
        lines.append("No samples found.")
        lines.append(separator)
        return "\n".join(lines)

    current = None
    for row in summary.itertuples(index=False):
        key = (row.writers, row.readers, row.size, row.vary)
        if key != current:
            current = key
            lines.append(describe_config(RunConfig(*key)))
        precision = 2 if is_throughput(row.metric) else 3
        stats = (
            f"{row.mean:.{precision}f} +/- {row.stdev:.{precision}f}"
            f" ({row.min:.{precision}f}..{row.max:.{precision}f})"
        )
        lines.append(
            row_format.format(
                f"  {row.metric}", row.engine, row.runs, row.points, stats
            )
        )
    lines.append(separator)
    return "\n".join(lines)


def write_summary(text, path):
    """Saves the summary text, replacing anything that is not ASCII."""
    try:
        with open(path, "w", encoding="ascii", errors="replace") as f_summary:
            f_summary.write(text)
    except OSError as e:
        raise WriteError(f"Could not write summary to file '{path}': {e}") from e
