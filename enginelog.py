# Ensure only ASCII characters are used in this script
"""
Reads storage-engine benchmark logs (one JSON record per line), classifies
each record, folds every file into a per-metric time series for one run,
and groups runs that share the same workload configuration.
"""

import collections
import datetime
import json
import re


# --- Configuration ---
# Message tag of the record declaring a run's engine and configuration
MARKER_MESSAGE = "running"
# Message tag -> metric name for throughput counters (value: rate)
THROUGHPUT_MESSAGES = {
    "counter get": "get rate",
    "counter set": "set rate",
}
# Message tag -> metric name for latency samples (value: mean, min, max)
LATENCY_MESSAGES = {
    "sample get.ready": "get ready",
    "sample get.first": "get first",
    "sample get.total": "get total",
    "sample set": "set",
}
# Fixed metric vocabulary, in chart order
METRICS = ["get rate", "set rate", "get ready", "get first", "get total", "set"]
# date, time, optional fraction (up to ns), numeric UTC offset, zone abbreviation
TIMESTAMP_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?"
    r" ([+-]\d{4}) ([A-Za-z]{1,6}|[+-]\d{2,4})"
)
NANOSECONDS_PER_SECOND = 1000000000


# --- Errors ---


class PlotError(Exception):
    """Base class for every fatal problem reported by the plotter."""


class DecodeError(PlotError):
    """A log record could not be read or does not have the expected shape."""


class MissingMarker(PlotError):
    """A run ended without its configuration marker record."""


class DuplicateMarker(PlotError):
    """A run declared its configuration more than once."""


class WriteError(PlotError):
    """An output file could not be created or written."""


# --- Data Types ---

RunConfig = collections.namedtuple("RunConfig", ["writers", "readers", "size", "vary"])

LogRecord = collections.namedtuple(
    "LogRecord",
    ["kind", "message", "timestamp", "engine", "config", "metric", "values"],
)

RunMeasurements = collections.namedtuple(
    "RunMeasurements", ["engine", "config", "offsets", "data", "source"]
)


# --- Record Decoding ---


def parse_timestamp(text):
    """
    Converts a timestamp like '2024-03-01 10:00:00.5 +0100 CET' to integer
    nanoseconds since the epoch. Raises ValueError for any other shape.
    """
    match = TIMESTAMP_PATTERN.fullmatch(text)
    if not match:
        raise ValueError(f"timestamp '{text}' does not match the expected format")
    base, fraction, offset, _zone = match.groups()
    moment = datetime.datetime.strptime(f"{base} {offset}", "%Y-%m-%d %H:%M:%S %z")
    seconds = int(moment.timestamp())
    nanos = int((fraction or "").ljust(9, "0"))
    return seconds * NANOSECONDS_PER_SECOND + nanos


def _require(entry, name, types, message):
    value = entry.get(name)
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) != (bool in types) or not isinstance(value, types):
        raise ValueError(f"'{message}' record has no valid '{name}' field")
    return value


def classify_record(entry):
    """
    Classifies one decoded JSON object.

    Args:
        entry (dict): The decoded record.

    Returns:
        A LogRecord whose kind is 'marker', 'throughput', 'latency' or
        'other'. Raises ValueError when required fields are missing.
    """
    if not isinstance(entry, dict):
        raise ValueError("record is not a JSON object")

    message = entry.get("message")
    if message is not None and not isinstance(message, str):
        raise ValueError("'message' field is not a string")
    timestamp = None
    if entry.get("timestamp"):
        if not isinstance(entry["timestamp"], str):
            raise ValueError("'timestamp' field is not a string")
        timestamp = parse_timestamp(entry["timestamp"])

    if message == MARKER_MESSAGE:
        config = RunConfig(
            writers=_require(entry, "writers", (int,), message),
            readers=_require(entry, "readers", (int,), message),
            size=_require(entry, "size", (int,), message),
            vary=_require(entry, "vary", (bool,), message),
        )
        engine = _require(entry, "engine", (str,), message)
        return LogRecord("marker", message, timestamp, engine, config, None, None)

    if message in THROUGHPUT_MESSAGES:
        rate = _require(entry, "rate", (int, float), message)
        return LogRecord(
            "throughput",
            message,
            timestamp,
            None,
            None,
            THROUGHPUT_MESSAGES[message],
            (float(rate),),
        )

    if message in LATENCY_MESSAGES:
        values = tuple(
            float(_require(entry, name, (int, float), message))
            for name in ("mean", "min", "max")
        )
        return LogRecord(
            "latency", message, timestamp, None, None, LATENCY_MESSAGES[message], values
        )

    return LogRecord("other", message, timestamp, None, None, None, None)


def read_records(lines, source="<stream>"):
    """
    Yields a LogRecord for every non-blank line. Stops quietly when the
    lines run out; raises DecodeError on the first malformed record.
    """
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
            record = classify_record(entry)
        except ValueError as e:
            raise DecodeError(f"{source}:{line_number}: {e}") from e
        yield record


# --- Run Accumulation ---


def accumulate_run(records, source="<stream>"):
    """
    Folds one run's records into a RunMeasurements.

    The first timestamped record is offset zero; later records add their
    distance from it, except that an offset equal to the previous one is
    not repeated. Out-of-order timestamps are passed through unchanged, so
    a clock stepping back yields a smaller (or negative) offset. At the end
    every series, offsets included, is cut to the shortest length so that
    samples line up with offsets.
    """
    engine = None
    config = None
    start = None
    offsets = []
    data = collections.defaultdict(list)

    for record in records:
        if record.timestamp is not None:
            if start is None:
                start = record.timestamp
                offsets.append(0)
            else:
                since_start = record.timestamp - start
                if offsets[-1] != since_start:
                    offsets.append(since_start)

        if record.kind == "marker":
            if config is not None:
                raise DuplicateMarker(
                    f"{source}: duplicate '{MARKER_MESSAGE}' message in logs"
                )
            engine = record.engine
            config = record.config
        elif record.kind in ("throughput", "latency"):
            data[record.metric].append(record.values)

    if config is None:
        raise MissingMarker(f"{source}: missing '{MARKER_MESSAGE}' message in logs")

    length = len(offsets)
    for values in data.values():
        length = min(length, len(values))

    return RunMeasurements(
        engine=engine,
        config=config,
        offsets=tuple(offsets[:length]),
        data={name: tuple(values[:length]) for name, values in data.items()},
        source=source,
    )


def process_file(path):
    """Reads one JSON log file and returns its RunMeasurements."""
    print(f"--> Processing file: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            run = accumulate_run(read_records(f, source=path), source=path)
    except (OSError, UnicodeDecodeError) as e:
        raise DecodeError(f"{path}: could not read file: {e}") from e

    print(
        f"   Engine '{run.engine}': {len(run.offsets)} aligned samples,"
        f" {len(run.data)} metric(s)."
    )
    return run


# --- Grouping ---


def add_run(grouped, run):
    """Appends a run to the bucket of its configuration."""
    grouped.setdefault(run.config, []).append(run)
    return grouped


def group_runs(runs):
    """Groups runs by configuration, keeping first-seen order."""
    grouped = {}
    for run in runs:
        add_run(grouped, run)
    return grouped
