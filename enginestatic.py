# Ensure only ASCII characters are used in this script
"""
Saves every chart description as a static PDF. Error bars cannot be
toggled on paper, so they are always drawn.
"""

import os
import re

import matplotlib.pyplot as plt
import numpy as np
import scienceplots  # noqa: F401  registers the "science" styles

from enginecharts import ERROR_BARS_ROLE, format_size
from enginelog import WriteError

font = {"size": 12}

plt.rc("font", **font)
plt.style.use(["science", "no-latex"])


# --- Configuration ---
FIGURE_SIZE = (8, 5)
ERROR_BAR_CAPSIZE = 5


def pdf_filename(chart):
    """Builds a file name like 'w2-r4-1KB-fixed-get_rate.pdf'."""
    config = chart.config
    vary = "vary" if config.vary else "fixed"
    metric = re.sub(r"[^A-Za-z0-9]+", "_", chart.metric)
    return (
        f"w{config.writers}-r{config.readers}-{format_size(config.size)}"
        f"-{vary}-{metric}.pdf"
    )


def plot_chart(chart):
    """Draws one ChartModel on a new matplotlib figure and returns it."""
    fig, ax = plt.subplots(figsize=FIGURE_SIZE)
    for series in chart.series:
        if series.role == ERROR_BARS_ROLE:
            if not series.x:
                continue
            y = np.asarray(series.y, dtype=float)
            yerr = np.vstack(
                [
                    y - np.asarray(series.lower, dtype=float),
                    np.asarray(series.upper, dtype=float) - y,
                ]
            )
            ax.errorbar(
                series.x,
                y,
                yerr=yerr,
                fmt="none",
                ecolor=series.color,
                capsize=ERROR_BAR_CAPSIZE,
                alpha=0.8,
            )
        else:
            ax.plot(series.x, series.y, marker="o", color=series.color, label=series.name)

    ax.set_title(f"{chart.title}\n{chart.subtitle}")
    ax.set_xlabel(chart.x_label)
    ax.set_ylabel(chart.y_label)
    if chart.series:
        ax.legend()
    ax.grid(axis="y", linestyle="--", alpha=0.6)
    fig.tight_layout()
    return fig


def export_pdfs(charts, directory):
    """
    Writes one PDF per chart into directory, creating it if needed.

    Returns:
        The list of written file paths.
    """
    print(f"\nGenerating {len(charts)} static plot(s)...")
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Could not create plot directory '{directory}': {e}") from e

    written = []
    for chart in charts:
        plot_filename = os.path.join(directory, pdf_filename(chart))
        fig = plot_chart(chart)
        try:
            fig.savefig(plot_filename, format="pdf", bbox_inches="tight")
        except OSError as e:
            raise WriteError(f"Error saving plot '{plot_filename}': {e}") from e
        finally:
            plt.close(fig)
        written.append(plot_filename)
        print(f"   Plotted '{pdf_filename(chart)}'")
    return written
