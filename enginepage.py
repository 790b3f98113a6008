# Ensure only ASCII characters are used in this script
"""
Turns chart descriptions into plotly figures and lays all of them out on
one HTML page. plotly.js itself is not embedded; the page loads it from
the assets URL.
"""

import html
import os
import tempfile

import numpy as np
import plotly.graph_objects as go
import plotly.io as pio

from enginecharts import ERROR_BARS_ROLE, TOGGLE_SCRIPT, WHISKER_STYLE
from enginelog import WriteError


# --- Configuration ---
DEFAULT_OUTPUT = "results.html"
DEFAULT_ASSETS = "https://cdn.plot.ly/plotly-2.35.2.min.js"
PAGE_TITLE = "Results"
CHART_HEIGHT = 450
PLOTLY_CONFIG = {"displaylogo": False, "modeBarButtonsToRemove": ["lasso2d", "select2d"]}
PAGE_STYLE = """
body { font-family: sans-serif; margin: 10px; }
.grid { display: flex; flex-wrap: wrap; gap: 10px; }
.chart { flex: 1 1 600px; border: 1px solid #dee2e6; padding: 5px; }
.toggle { float: right; position: relative; z-index: 1; }
"""


# --- Figure Conversion ---


def chart_to_figure(chart):
    """Builds a plotly figure for one ChartModel."""
    fig = go.Figure()
    for series in chart.series:
        if series.role == ERROR_BARS_ROLE:
            y = np.asarray(series.y, dtype=float)
            error_y = dict(
                WHISKER_STYLE,
                array=(np.asarray(series.upper, dtype=float) - y).tolist(),
                arrayminus=(y - np.asarray(series.lower, dtype=float)).tolist(),
                color=series.color,
            )
            fig.add_trace(
                go.Scatter(
                    x=series.x,
                    y=series.y,
                    name=series.name,
                    mode="markers",
                    marker=dict(color=series.color, size=4),
                    error_y=error_y,
                    legendgroup=series.group,
                    showlegend=False,
                    visible=series.visible,
                    meta=series.role,
                )
            )
        else:
            fig.add_trace(
                go.Scatter(
                    x=series.x,
                    y=series.y,
                    name=series.name,
                    mode="lines+markers",
                    line=dict(color=series.color, shape="spline"),
                    legendgroup=series.group,
                    visible=series.visible,
                    meta=series.role,
                )
            )

    subtitle = "<br>".join(html.escape(line) for line in chart.subtitle.split("\n"))
    fig.update_layout(
        title=dict(text=f"{html.escape(chart.title)}<br><sub>{subtitle}</sub>"),
        xaxis_title=chart.x_label,
        yaxis_title=chart.y_label,
        template="plotly_white",
        height=CHART_HEIGHT,
        margin=dict(t=90, l=70, r=20, b=50),
        legend=dict(orientation="h", yanchor="bottom", y=1.0, xanchor="right", x=1.0),
    )
    return fig


# --- Page Rendering ---


def render_page(charts, assets=DEFAULT_ASSETS):
    """
    Renders every chart into one HTML document.

    The toggle script is appended once, after all charts, and only when
    at least one chart has a toggle control.
    """
    lines = []
    lines.append("<!DOCTYPE html>")
    lines.append("<html>")
    lines.append("<head>")
    lines.append('<meta charset="utf-8">')
    lines.append(f"<title>{PAGE_TITLE}</title>")
    lines.append(f'<script src="{html.escape(assets)}"></script>')
    lines.append(f"<style>{PAGE_STYLE}</style>")
    lines.append("</head>")
    lines.append("<body>")
    lines.append('<div class="grid">')

    has_toggle = False
    for index, chart in enumerate(charts):
        lines.append('<div class="chart">')
        if chart.toggle is not None:
            has_toggle = True
            lines.append(
                f'<button type="button" class="toggle" onclick="{chart.toggle.function}()">'
                f"{html.escape(chart.toggle.label)}</button>"
            )
        lines.append(
            pio.to_html(
                chart_to_figure(chart),
                full_html=False,
                include_plotlyjs=False,
                div_id=f"chart-{index}",
                config=PLOTLY_CONFIG,
            )
        )
        lines.append("</div>")

    lines.append("</div>")
    if has_toggle:
        lines.append(f"<script>{TOGGLE_SCRIPT}</script>")
    lines.append("</body>")
    lines.append("</html>")
    return "\n".join(lines)


def write_page(page, path=DEFAULT_OUTPUT):
    """
    Writes the page through a temporary file in the target directory so
    that a failed write never leaves a partial page behind.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".page-", suffix=".html", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(page)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as e:
        message = f"Could not write page to '{path}': {e}"
        if tmp_path is not None and os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as cleanup_error:
                message += f" (removing '{tmp_path}' also failed: {cleanup_error})"
        raise WriteError(message) from e
    print(f"Page saved to '{path}'")
