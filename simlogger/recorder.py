"""Log Recorder - buffers positions and composes the log document.

Composition is pure: it reads a session (and a snapshot of its positions)
and returns text. Writing the text anywhere is somebody else's job, so a
slow disk never holds up telemetry.

Document layout, top to bottom:
    A record        manufacturer / logger version
    H records       date, fixed identity lines, aircraft
    I record        B record extensions (FXA, ENL)
    C records       route, only when a plan with waypoints was loaded
    L records       PC time, companion fingerprints, lock status, general checksum
    B records       one per accepted position
    G record        checksum of every line above
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import PureWindowsPath
from typing import Optional, Sequence

from config.constants import (
    LOGGER_NAME,
    LOGGER_VERSION,
    HEADER_FIX_ACCURACY,
    HARDWARE_VERSION,
    SIMULATOR_NAME,
    POSITION_MARKER,
    POSITION_FIX_FLAG,
    POSITION_FIX_ACCURACY,
    ENGINE_LEVEL_MAX,
    ENGINE_LEVEL_RPM_CEILING,
    ENGINE_LEVEL_DIVISOR,
    ALTITUDE_MAX,
    TRAILER_MARKER,
    GENERAL_CHECKSUM_TAG,
    FINGERPRINT_LINES,
    LOG_EXTENSION,
    MAX_RECORDS,
    MIN_RECORDS,
)
from .checksum import checksum_lines
from .core import SessionTooShort, emit_receipt
from .fingerprint import fingerprint_aggregate
from .session import FlightSession, PositionSample
from .verify import VerificationResult, verify_text

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|]')


@dataclass
class ComposedLog:
    """A finished document, not yet written anywhere."""
    text: str
    suggested_name: str
    records: int
    digest: str


def format_position_line(sample: PositionSample) -> str:
    """One fixed-width B record.

    Latitude/longitude are truncated (never rounded) into degrees, minutes
    and thousandths of a minute. Altitude is truncated to whole meters and
    written twice (pressure and GNSS altitude are the same thing in a sim).
    """
    t = sample.time_of_day
    hours = t // 3600
    minutes = (t - hours * 3600) // 60
    secs = t % 60

    ns = "N" if sample.latitude > 0.0 else "S"
    ew = "E" if sample.longitude > 0.0 else "W"
    abs_lat = abs(sample.latitude)
    abs_lon = abs(sample.longitude)

    lat_dd = int(abs_lat)
    lat_mm = int((abs_lat - lat_dd) * 60.0)
    lat_mmm = int((abs_lat - lat_dd - lat_mm / 60.0) * 60000.0)
    lon_ddd = int(abs_lon)
    lon_mm = int((abs_lon - lon_ddd) * 60.0)
    lon_mmm = int((abs_lon - lon_ddd - lon_mm / 60.0) * 60000.0)

    altitude = min(max(0, int(sample.altitude)), ALTITUDE_MAX)
    if sample.engine_rpm > ENGINE_LEVEL_RPM_CEILING:
        engine_level = ENGINE_LEVEL_MAX
    else:
        engine_level = max(0, int(sample.engine_rpm)) // ENGINE_LEVEL_DIVISOR

    return "%s%02d%02d%02d%02d%02d%03d%s%03d%02d%03d%s%s%.5d%.5d%03d%03d\n" % (
        POSITION_MARKER, hours, minutes, secs,
        lat_dd, lat_mm, lat_mmm, ns,
        lon_ddd, lon_mm, lon_mmm, ew,
        POSITION_FIX_FLAG, altitude, altitude, POSITION_FIX_ACCURACY, engine_level)


def header_lines(session: FlightSession, now: datetime) -> list[str]:
    """A, H and I records."""
    flight_date = session.flight_date or now.date()
    version = "%.2f" % LOGGER_VERSION
    return [
        f"AXXX {LOGGER_NAME} v{version}\n",
        f"HFDTE{flight_date.day:02d}{flight_date.month:02d}{flight_date.year % 100:02d}\n",
        f"HFFXA{HEADER_FIX_ACCURACY:03d}\n",
        "HFPLTPILOTINCHARGE: not recorded\n",
        "HFCM2CREW2: not recorded\n",
        f"HFGTYGLIDERTYPE:{session.aircraft_title}\n",
        f"HFGIDGLIDERID:{session.aircraft_id}\n",
        "HFDTM100GPSDATUM: WGS-1984\n",
        f"HFRFWFIRMWAREVERSION: {version}\n",
        f"HFRHWHARDWAREVERSION: {HARDWARE_VERSION}\n",
        f"HFFTYFRTYPE: {LOGGER_NAME}\n",
        f"HFGPSGPS:{SIMULATOR_NAME}\n",
        f"HFPRSPRESSALTSENSOR: {SIMULATOR_NAME}\n",
        f"HFCIDCOMPETITIONID:{session.aircraft_id}\n",
        f"HFCCLCOMPETITIONCLASS:{SIMULATOR_NAME}\n",
        # B record extensions: FXA in columns 36-38, ENL in 39-41
        "I023638FXA3941ENL\n",
    ]


def comment_lines(session: FlightSession, now: datetime) -> list[str]:
    """L records: fingerprints, lock status and the general checksum."""
    lines = [f"L FSX date/time on users PC:  {now:%Y-%m-%d %H:%M}\n"]

    for kind, label in FINGERPRINT_LINES:
        fp = session.fingerprint(kind)
        lines.append(f"L FSX {label}{fp.digest} ({fp.name})\n")

    locks = session.locks
    lines.append("L FSX CumulusX status:        %s\n" % ("LOCKED OK" if locks.cumulus_locked else "UNLOCKED"))
    lines.append("L FSX WX status=              %s\n" % ("LOCKED OK" if locks.weather_locked else "UNLOCKED"))
    lines.append("L FSX ThermalDescriptions.xml %s\n" % (
        "STILL BEING USED" if locks.thermal_file_present else "REMOVED OK"))

    digests, labels = session.aggregate_inputs()
    general = fingerprint_aggregate(digests, labels)
    lines.append(f"{GENERAL_CHECKSUM_TAG}            {general}  <---- CHECK THIS FIRST\n")
    return lines


def suggested_name(session: FlightSession, reason: str, now: datetime) -> str:
    """File name for a log: aircraft, flight, local time and reason."""
    stem = PureWindowsPath(str(session.flight_path)).stem if session.flight_path else ""
    name = f"{session.aircraft_id}_{stem}_{now:%Y-%m-%d_%H%M}"
    if len(reason) > 1:
        name += f"({reason})"
    return _UNSAFE_FILENAME.sub("_", name) + LOG_EXTENSION


class LogRecorder:
    """Accumulates positions into a session and composes its document."""

    def __init__(self, max_records: int = MAX_RECORDS, min_records: int = MIN_RECORDS):
        self.max_records = max_records
        self.min_records = min_records

    def accept(self, session: FlightSession, sample: PositionSample) -> bool:
        """Append a sample unless the buffer is full or the timestamp repeats.

        Returns:
            True if the sample was kept
        """
        positions = session.positions
        if len(positions) >= self.max_records:
            return False
        if positions and positions[-1].time_of_day == sample.time_of_day:
            return False
        positions.append(sample)
        return True

    def compose_lines(self, session: FlightSession, now: Optional[datetime] = None,
                      positions: Optional[Sequence[PositionSample]] = None) -> list[str]:
        """Every line of the document, trailer included.

        Args:
            session: Session to describe
            now: Local time written into the log (defaults to now)
            positions: Snapshot to use instead of session.positions

        Returns:
            Lines, each newline-terminated
        """
        now = now or datetime.now()
        positions = session.positions if positions is None else positions

        lines = header_lines(session, now)
        if session.route is not None:
            lines.extend(session.route.to_lines())
        lines.extend(comment_lines(session, now))
        lines.extend(format_position_line(sample) for sample in positions)

        lines.append(f"{TRAILER_MARKER}{checksum_lines(lines)}\n")
        return lines

    def finalize(self, session: FlightSession, reason: str = "",
                 now: Optional[datetime] = None,
                 positions: Optional[Sequence[PositionSample]] = None) -> ComposedLog:
        """Compose the document for a session.

        Raises:
            SessionTooShort: Fewer than min_records positions; nothing
                should be written
        """
        now = now or datetime.now()
        positions = list(session.positions if positions is None else positions)

        if len(positions) < self.min_records:
            raise SessionTooShort(len(positions), self.min_records)

        lines = self.compose_lines(session, now, positions)
        composed = ComposedLog(
            text="".join(lines),
            suggested_name=suggested_name(session, reason, now),
            records=len(positions),
            digest=lines[-1][1:].rstrip("\n"),
        )

        emit_receipt("log_composed", {
            "aircraft_id": session.aircraft_id,
            "reason": reason,
            "records": composed.records,
            "trailer": composed.digest,
            "suggested_name": composed.suggested_name
        }, silent=True)
        return composed

    def verify(self, text: str) -> VerificationResult:
        """Check a document held in memory."""
        return verify_text(text)
