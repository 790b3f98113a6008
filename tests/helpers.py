"""Builders for benchmark log lines used across the tests."""

from __future__ import annotations

import json
from pathlib import Path


def ts(seconds: int, nanos: int = 0) -> str:
    fraction = f".{nanos:09d}".rstrip("0") if nanos else ""
    return f"2024-01-02 15:04:{seconds:02d}{fraction} +0000 UTC"


def marker(engine="X", writers=2, readers=4, size=1024, vary=False) -> str:
    return json.dumps(
        {
            "level": "info",
            "engine": engine,
            "writers": writers,
            "readers": readers,
            "size": size,
            "vary": vary,
            "time": "2024-01-02T15:04:00Z",
            "message": "running",
        }
    )


def counter(seconds: int, rate: float, message: str = "counter get", nanos: int = 0) -> str:
    return json.dumps(
        {
            "level": "info",
            "count": 10,
            "rate": rate,
            "timestamp": ts(seconds, nanos),
            "message": message,
        }
    )


def sample(seconds: int, mean: float, low: float, high: float, message: str = "sample set") -> str:
    return json.dumps(
        {
            "level": "info",
            "mean": mean,
            "min": low,
            "max": high,
            "timestamp": ts(seconds),
            "message": message,
        }
    )


def other(seconds: int, message: str = "progress") -> str:
    return json.dumps({"level": "debug", "timestamp": ts(seconds), "message": message})


def write_log(directory: Path, name: str, lines: list[str]) -> str:
    path = Path(directory) / name
    path.write_text("\n".join(lines) + "\n")
    return str(path)


def scenario_lines(engine: str, rates: list[float]) -> list[str]:
    lines = [marker(engine=engine)]
    lines.extend(counter(i, rate) for i, rate in enumerate(rates))
    return lines
