"""Telemetry Replay

Feeds recorded telemetry through a FlightLogger as if a simulator were
sending it, and reads B records back out of a finished log.

CSV columns: time (seconds since midnight UTC), latitude, longitude,
altitude (meters), on_ground (0/1), rpm.
"""

from typing import Iterable

import pandas as pd

from .core import FileError, emit_receipt
from .phase import PhaseEvent
from .session import PositionSample

TELEMETRY_COLUMNS = ("time", "latitude", "longitude", "altitude", "on_ground", "rpm")

TRACK_COLUMNS = ["time_of_day", "latitude", "longitude", "altitude", "gnss_altitude",
                 "fix_accuracy", "engine_level"]


def load_telemetry(path) -> list[PositionSample]:
    """Load telemetry samples from a CSV file.

    Args:
        path: CSV file with the TELEMETRY_COLUMNS header

    Returns:
        Samples in file order, incomplete rows dropped

    Raises:
        FileError: If the file cannot be read
        ValueError: If a required column is missing
    """
    try:
        df = pd.read_csv(path)
    except OSError as e:
        raise FileError(path, "read", e.strerror or str(e)) from e

    missing = [col for col in TELEMETRY_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"telemetry file {path} is missing columns: {', '.join(missing)}")

    df = df.dropna(subset=list(TELEMETRY_COLUMNS))

    samples = [
        PositionSample(
            time_of_day=int(row.time),
            latitude=float(row.latitude),
            longitude=float(row.longitude),
            altitude=float(row.altitude),
            on_ground=bool(row.on_ground),
            engine_rpm=int(row.rpm),
        )
        for row in df.itertuples(index=False)
    ]

    emit_receipt("telemetry_loaded", {
        "path": str(path),
        "samples": len(samples)
    }, silent=True)
    return samples


def replay(logger, samples: Iterable[PositionSample]) -> list[PhaseEvent]:
    """Feed samples to a FlightLogger one tick at a time.

    Returns:
        The takeoff/landing events produced, in order
    """
    events = []
    for sample in samples:
        event = logger.on_telemetry(sample)
        if event is not PhaseEvent.NONE:
            events.append(event)
    return events


def _decimal_degrees(degrees: str, minutes: str, thousandths: str, hemisphere: str, negative: str) -> float:
    value = int(degrees) + (int(minutes) + int(thousandths) / 1000.0) / 60.0
    return -value if hemisphere == negative else value


def read_track(text: str) -> pd.DataFrame:
    """Decode the B records of a log into a DataFrame.

    Args:
        text: Log document

    Returns:
        One row per B record with TRACK_COLUMNS
    """
    rows = []
    for line in text.splitlines():
        if not line.startswith("B") or len(line) < 41:
            continue
        rows.append({
            "time_of_day": int(line[1:3]) * 3600 + int(line[3:5]) * 60 + int(line[5:7]),
            "latitude": _decimal_degrees(line[7:9], line[9:11], line[11:14], line[14], "S"),
            "longitude": _decimal_degrees(line[15:18], line[18:20], line[20:23], line[23], "W"),
            "altitude": int(line[25:30]),
            "gnss_altitude": int(line[30:35]),
            "fix_accuracy": int(line[35:38]),
            "engine_level": int(line[38:41]),
        })
    return pd.DataFrame(rows, columns=TRACK_COLUMNS)
