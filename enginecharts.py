# Ensure only ASCII characters are used in this script
"""
Builds one comparative chart description per (configuration, metric) pair
from grouped engine runs. Every run sharing a configuration becomes a
series on the same time axis; latency charts also get a hidden min/max
error-bar series per run and a toggle that shows or hides all of them.

The chart descriptions are plain namedtuples so that both the HTML page
and the static PDF export can be rendered from the same data.
"""

import collections

import numpy as np
import seaborn as sns

from enginelog import METRICS, NANOSECONDS_PER_SECOND


# --- Configuration ---
# Offsets are stored in nanoseconds and displayed in this unit
DISPLAY_UNIT_NS = NANOSECONDS_PER_SECOND
DISPLAY_UNIT_NAME = "s"
THROUGHPUT_AXIS_LABEL = "ops/s"
LATENCY_AXIS_LABEL = "duration (ms)"
HIGHER_IS_BETTER = "higher is better"
LOWER_IS_BETTER = "lower is better"
# seaborn palette used to give every engine one colour on all charts
ENGINE_PALETTE = "colorblind"
LINE_ROLE = "line"
ERROR_BARS_ROLE = "error-bars"
# Whiskers: vertical min-max line with caps 5px either side of the mean
WHISKER_STYLE = {"type": "data", "symmetric": False, "width": 5, "thickness": 1.5}
TOGGLE_LABEL = "Toggle error bars"
TOGGLE_FUNCTION = "toggleErrorBars"
# Binary units, largest first, for human-readable value sizes
SIZE_UNITS = [
    ("EB", 1 << 60),
    ("PB", 1 << 50),
    ("TB", 1 << 40),
    ("GB", 1 << 30),
    ("MB", 1 << 20),
    ("KB", 1 << 10),
]

# Runs in the browser, not here. One page-wide flag keeps every latency
# chart in the same state.
TOGGLE_SCRIPT = """
var errorBarsVisible = false;

function toggleErrorBars() {
    errorBarsVisible = !errorBarsVisible;
    var plots = document.querySelectorAll(".js-plotly-plot");
    for (var i = 0; i < plots.length; i++) {
        var plot = plots[i];
        var indices = [];
        for (var j = 0; j < plot.data.length; j++) {
            if (plot.data[j].meta === "error-bars") {
                indices.push(j);
            }
        }
        if (indices.length > 0) {
            Plotly.restyle(plot, {visible: errorBarsVisible}, indices);
        }
    }
}
"""


# --- Chart Model ---

SeriesModel = collections.namedtuple(
    "SeriesModel",
    ["name", "role", "x", "y", "lower", "upper", "color", "visible", "group"],
)

ToggleControl = collections.namedtuple("ToggleControl", ["label", "function", "role"])

ChartModel = collections.namedtuple(
    "ChartModel",
    [
        "title",
        "subtitle",
        "metric",
        "config",
        "x_label",
        "y_label",
        "hint",
        "series",
        "toggle",
    ],
)


# --- Helper Functions ---


def format_size(size):
    """Formats a byte count with the largest unit dividing it (1024 -> '1KB')."""
    if size == 0:
        return "0B"
    for unit, factor in SIZE_UNITS:
        if size % factor == 0:
            return f"{size // factor}{unit}"
    return f"{size}B"


def is_throughput(metric):
    return "rate" in metric


def describe_config(config):
    vary = "true" if config.vary else "false"
    return (
        f"writers={config.writers} readers={config.readers}"
        f" size={format_size(config.size)} vary={vary}"
    )


def engine_colors(grouped):
    """Maps every engine name found in the groups to a hex colour."""
    engines = sorted({run.engine for runs in grouped.values() for run in runs})
    if not engines:
        return {}
    palette = sns.color_palette(ENGINE_PALETTE, len(engines)).as_hex()
    return dict(zip(engines, palette))


def scale_offsets(offsets):
    """Converts nanosecond offsets to the display unit."""
    scaled = np.asarray(offsets, dtype=float) / DISPLAY_UNIT_NS
    return tuple(scaled.tolist())


# --- Assembly ---


def build_chart(config, metric, runs, colors=None):
    """
    Builds the ChartModel for one metric of one configuration.

    Args:
        config (RunConfig): The configuration shared by all runs.
        metric (str): One of METRICS.
        runs (list): RunMeasurements in file-processing order.
        colors (dict): Optional engine -> colour map shared across charts.

    Returns:
        A ChartModel with one line series per run and, for latency
        metrics, one hidden error-bar series per run.
    """
    if colors is None:
        colors = engine_colors({config: runs})

    if is_throughput(metric):
        y_label, hint, toggle = THROUGHPUT_AXIS_LABEL, HIGHER_IS_BETTER, None
    else:
        y_label, hint = LATENCY_AXIS_LABEL, LOWER_IS_BETTER
        toggle = ToggleControl(TOGGLE_LABEL, TOGGLE_FUNCTION, ERROR_BARS_ROLE)

    series = []
    for index, run in enumerate(runs):
        values = run.data.get(metric, ())
        x = scale_offsets(run.offsets[: len(values)])
        y = tuple(value[0] for value in values)
        color = colors.get(run.engine)
        group = f"{run.engine}-{index}"
        series.append(
            SeriesModel(run.engine, LINE_ROLE, x, y, None, None, color, True, group)
        )
        if toggle is not None:
            lower = tuple(value[1] for value in values)
            upper = tuple(value[2] for value in values)
            series.append(
                SeriesModel(
                    run.engine, ERROR_BARS_ROLE, x, y, lower, upper, color, False, group
                )
            )

    return ChartModel(
        title=metric,
        subtitle=f"{describe_config(config)}\n{hint}",
        metric=metric,
        config=config,
        x_label=f"duration ({DISPLAY_UNIT_NAME})",
        y_label=y_label,
        hint=hint,
        series=tuple(series),
        toggle=toggle,
    )


def build_charts(grouped):
    """Builds every chart: configurations in group order, then METRICS order."""
    colors = engine_colors(grouped)
    charts = []
    for config, runs in grouped.items():
        for metric in METRICS:
            charts.append(build_chart(config, metric, runs, colors))
    return charts
