# Ensure only ASCII characters are used in this script
"""
Processes storage-engine benchmark JSON logs (one file per run), aligns
each run's metrics on a shared time axis, groups runs by workload
configuration, and writes one HTML page of interactive comparison charts.
Optionally also saves a text summary and static PDF plots.
"""

import argparse
import os
import shutil
import sys
import tempfile

from enginecharts import build_charts
from enginelog import PlotError, WriteError, add_run, process_file
from enginepage import DEFAULT_ASSETS, DEFAULT_OUTPUT, render_page, write_page
from enginestatic import export_pdfs
from enginesummary import format_summary, summarize, write_summary


def build_parser():
    parser = argparse.ArgumentParser(
        description="Plot storage-engine benchmark logs as interactive comparison charts."
    )
    parser.add_argument(
        "files",
        metavar="FILE",
        type=str,
        nargs="*",
        help="JSON log file(s) to use, one run per file.",
    )
    parser.add_argument(
        "-O",
        "--output",
        metavar="FILE",
        default=DEFAULT_OUTPUT,
        help=f"Write rendered plots to this file. Default: {DEFAULT_OUTPUT}.",
    )
    parser.add_argument(
        "--assets",
        metavar="URL",
        default=DEFAULT_ASSETS,
        help=f"Location of the plotly.js bundle. Default: {DEFAULT_ASSETS}.",
    )
    parser.add_argument(
        "--summary",
        metavar="FILE",
        help="Also save the per-engine summary table to this file.",
    )
    parser.add_argument(
        "--pdf-dir",
        metavar="DIR",
        help="Also save every chart as a static PDF in this directory.",
    )
    return parser


# --- Output Staging ---


def _staging_path(path, directory=False):
    """
    Creates an empty temporary file (or directory) beside path, so that a
    later rename into place stays on one filesystem.
    """
    if directory and os.path.exists(path) and not os.path.isdir(path):
        raise WriteError(f"Could not create plot directory '{path}': not a directory")
    parent = os.path.dirname(os.path.abspath(path))
    try:
        if directory:
            staging = tempfile.mkdtemp(prefix=".staging-", dir=parent)
            os.chmod(staging, 0o755)
        else:
            fd, staging = tempfile.mkstemp(prefix=".staging-", dir=parent)
            os.close(fd)
            os.chmod(staging, 0o644)
    except OSError as e:
        raise WriteError(f"Could not prepare output '{path}': {e}") from e
    return staging


def _discard(staged):
    """Removes staged outputs, reporting (not hiding) any removal failure."""
    for staging, _ in staged:
        try:
            if os.path.isdir(staging):
                shutil.rmtree(staging)
            elif os.path.exists(staging):
                os.remove(staging)
        except OSError as e:
            print(f"   Error: could not remove '{staging}': {e}", file=sys.stderr)


def _commit(staging, path):
    try:
        if os.path.isdir(staging) and os.path.isdir(path):
            for name in os.listdir(staging):
                os.replace(os.path.join(staging, name), os.path.join(path, name))
            os.rmdir(staging)
        else:
            os.replace(staging, path)
    except OSError as e:
        raise WriteError(f"Could not move output into '{path}': {e}") from e


def run(args):
    """Processes every file, then writes the outputs. Raises PlotError."""
    grouped = {}
    for path in args.files:
        add_run(grouped, process_file(path))
    print(f"\nFound {len(grouped)} distinct configuration(s).")

    # Everything is built before anything is written
    charts = build_charts(grouped)
    page = render_page(charts, assets=args.assets)
    summary_text = format_summary(summarize(grouped))
    print("\n" + summary_text)

    # Optional outputs are staged and only moved into place once the page
    # is written; any failure leaves none of them behind.
    staged = []
    try:
        if args.summary:
            staged.append((_staging_path(args.summary), args.summary))
            write_summary(summary_text, staged[-1][0])
        if args.pdf_dir:
            staged.append((_staging_path(args.pdf_dir, directory=True), args.pdf_dir))
            export_pdfs(charts, staged[-1][0])
        write_page(page, args.output)
    except PlotError:
        _discard(staged)
        raise

    for staging, path in staged:
        _commit(staging, path)
        print(f"Saved '{path}'")


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except PlotError as e:
        print(f"\nError: {e}", file=sys.stderr)
        if e.__cause__ is not None:
            print(f"   Caused by: {e.__cause__!r}", file=sys.stderr)
        print("\nAborting due to errors during processing.", file=sys.stderr)
        return 1

    print("\nScript finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
