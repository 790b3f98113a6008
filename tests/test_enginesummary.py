#!/usr/bin/env python3

from __future__ import annotations

import os
import statistics
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from enginelog import RunConfig, RunMeasurements, WriteError, group_runs  # noqa: E402
from enginesummary import SUMMARY_COLUMNS, format_summary, summarize, write_summary  # noqa: E402

SECOND = 1000000000
CONFIG = RunConfig(writers=2, readers=4, size=1024, vary=False)


def make_run(engine: str, rates: list[float], latency=None) -> RunMeasurements:
    data = {"get rate": tuple((rate,) for rate in rates)}
    if latency is not None:
        data["get ready"] = tuple(latency)
    return RunMeasurements(
        engine, CONFIG, tuple(i * SECOND for i in range(len(rates))), data, f"{engine}.log"
    )


class SummarizeTests(unittest.TestCase):
    def test_rows_per_engine(self) -> None:
        grouped = group_runs(
            [
                make_run("X", [100.0, 150.0, 130.0]),
                make_run("Y", [90.0, 95.0, 100.0]),
                make_run("X", [110.0, 120.0, 130.0]),
            ]
        )
        summary = summarize(grouped)
        self.assertEqual(list(summary.columns), SUMMARY_COLUMNS)
        self.assertEqual(list(summary["engine"]), ["X", "Y"])

        x_row = summary[summary["engine"] == "X"].iloc[0]
        values = [100.0, 150.0, 130.0, 110.0, 120.0, 130.0]
        self.assertEqual(x_row["runs"], 2)
        self.assertEqual(x_row["points"], 6)
        self.assertAlmostEqual(x_row["mean"], statistics.mean(values))
        self.assertAlmostEqual(x_row["stdev"], statistics.stdev(values))
        self.assertEqual(x_row["min"], 100.0)
        self.assertEqual(x_row["max"], 150.0)

    def test_latency_uses_mean_and_single_point_has_no_spread(self) -> None:
        grouped = group_runs([make_run("X", [1.0], latency=[(2.5, 1.0, 9.0)])])
        summary = summarize(grouped)
        row = summary[summary["metric"] == "get ready"].iloc[0]
        self.assertEqual(row["mean"], 2.5)
        self.assertEqual(row["stdev"], 0.0)
        self.assertEqual(list(summary["metric"]), ["get rate", "get ready"])

    def test_empty(self) -> None:
        summary = summarize({})
        self.assertTrue(summary.empty)
        self.assertIn("No samples found.", format_summary(summary))


class FormatSummaryTests(unittest.TestCase):
    def test_table_text(self) -> None:
        grouped = group_runs([make_run("X", [100.0, 150.0, 130.0]), make_run("Y", [90.0, 95.0, 100.0])])
        text = format_summary(summarize(grouped))
        self.assertIn("Storage Engine Benchmark Summary", text)
        self.assertEqual(text.count("writers=2 readers=4 size=1KB vary=false"), 1)
        self.assertIn("126.67 +/- ", text)
        self.assertIn("95.00 +/- 5.00 (90.00..100.00)", text)
        text.encode("ascii")


class WriteSummaryTests(unittest.TestCase):
    def test_write(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "summary.txt")
            write_summary("engine é", path)
            with open(path, encoding="ascii") as f:
                self.assertEqual(f.read(), "engine ?")

    def test_write_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(WriteError):
                write_summary("text", os.path.join(tmp, "absent", "summary.txt"))


if __name__ == "__main__":
    unittest.main()
