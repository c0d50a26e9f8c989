"""Flight Logger - the surface a simulator bridge talks to.

The bridge owns the simulator connection and calls one method per event:
file loads, aircraft strings, lock codes, telemetry ticks, quit. The logger
keeps the FlightSession, decides when to fingerprint and when to write, and
hands back composed logs or errors.

Every call is expected from one stream of events. Should a host call in
from several threads anyway, the session lock serialises them and a second
finalize while one is composing is rejected with CompositionInProgress.
"""

import time
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from threading import Lock
from typing import Optional

from config.constants import (
    AIRCRAFT_CONFIG_NAME,
    EMPTY_DIGEST,
    FILE_AIRCRAFT,
    FILE_CONFIG,
    FILE_FLIGHT,
    FILE_WEATHER,
    FLIGHT_COMPANIONS,
    LOG_DIRECTORY,
    REASON_CRASH,
    REASON_LANDING,
    REASON_MANUAL,
    REASON_QUIT,
    THERMAL_DESCRIPTIONS_PATH,
    TICK_COUNT,
)
from config.features import is_feature_enabled
from .cfg_filter import ConfigFilter
from .core import (
    CompositionInProgress,
    FileError,
    SessionTooShort,
    dual_hash,
    emit_anomaly,
    emit_receipt,
)
from .fingerprint import display_name, fingerprint_binary, fingerprint_filtered_text
from .phase import PhaseEvent
from .recorder import ComposedLog, LogRecorder
from .route import load_route_plan
from .session import Fingerprint, FlightSession, PositionSample


def _single_line(text: str) -> str:
    return " ".join(str(text).splitlines())


def write_document(composed: ComposedLog, directory: Optional[Path] = None) -> Path:
    """Write a composed log to disk.

    Args:
        composed: Output of LogRecorder.finalize
        directory: Target folder, created if missing (defaults to LOG_DIRECTORY)

    Returns:
        Path of the written file

    Raises:
        FileError: If the folder or file cannot be written
    """
    directory = Path(directory or LOG_DIRECTORY)
    path = directory / composed.suggested_name
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="latin-1", errors="replace", newline="\n") as f:
            f.write(composed.text)
    except OSError as e:
        error = FileError(path, "write", e.strerror or str(e))
        emit_anomaly(error, "write_log")
        raise error from e

    emit_receipt("log_written", {
        "path": str(path),
        "records": composed.records,
        "trailer": composed.digest,
        "document_hash": dual_hash(composed.text)
    }, silent=True)
    return path


class FlightLogger:
    """Owns one FlightSession and reacts to host events."""

    def __init__(self, log_directory: Optional[Path] = None,
                 recorder: Optional[LogRecorder] = None,
                 thermal_descriptions_path: Optional[Path] = None):
        """Initialize the logger.

        Args:
            log_directory: Where logs are written (defaults to LOG_DIRECTORY)
            recorder: Recorder to use, mainly to shrink caps in tests
            thermal_descriptions_path: File whose presence marks stock thermals
        """
        self.log_directory = Path(log_directory or LOG_DIRECTORY)
        self.recorder = recorder or LogRecorder()
        self.thermal_descriptions_path = Path(thermal_descriptions_path or THERMAL_DESCRIPTIONS_PATH)
        self.session = FlightSession()
        self.last_event = PhaseEvent.NONE
        self.written: list[Path] = []
        self._tick_counter = 0
        self._lock = Lock()
        self._composing = False

    # -------------------------------------------------------------------------
    # File loads
    # -------------------------------------------------------------------------

    def _fingerprint(self, kind: str, path: Path, line_filter=None) -> bool:
        """Fingerprint one file into the session; a missing file gets a placeholder."""
        start_time = time.perf_counter()
        try:
            if line_filter is None:
                digest = fingerprint_binary(path)
            else:
                digest = fingerprint_filtered_text(path, line_filter)
        except FileError as e:
            self.session.fingerprints[kind] = Fingerprint(EMPTY_DIGEST, display_name(path), path)
            emit_receipt("fingerprint", {
                "kind": kind,
                "path": str(path),
                "digest": EMPTY_DIGEST,
                "error": str(e)
            }, silent=True)
            return False

        self.session.fingerprints[kind] = Fingerprint(digest, display_name(path), path)
        emit_receipt("fingerprint", {
            "kind": kind,
            "path": str(path),
            "digest": digest,
            "latency_ms": (time.perf_counter() - start_time) * 1000
        }, silent=True)
        return True

    def on_flight_loaded(self, path):
        """A flight file was loaded: fingerprint it and its companions, start a new log."""
        path = Path(path)
        with self._lock:
            self._start_new_log()
            self.session.flight_path = path
            self._fingerprint(FILE_FLIGHT, path)
            for kind, extension in FLIGHT_COMPANIONS.items():
                loaded = self._fingerprint(kind, path.with_suffix(extension))
                if kind == FILE_WEATHER:
                    self.session.locks.weather_locked = loaded

    def on_aircraft_loaded(self, path):
        """An aircraft was loaded: fingerprint it and the performance parts of its config."""
        path = Path(path)
        with self._lock:
            self._start_new_log()
            self._fingerprint(FILE_AIRCRAFT, path)
            self._fingerprint(FILE_CONFIG, path.parent / AIRCRAFT_CONFIG_NAME, ConfigFilter())

    def on_flight_plan_loaded(self, path, now: Optional[datetime] = None):
        """A flight plan was activated: replace the route, start a new log."""
        with self._lock:
            self._start_new_log()
            try:
                self.session.route = load_route_plan(path, now)
            except FileError as e:
                self.session.route = None
                emit_receipt("parse_incomplete", {
                    "path": str(path),
                    "error": str(e)
                }, silent=True)

    def _start_new_log(self):
        self.session.reset_positions()
        self._tick_counter = 0
        self.last_event = PhaseEvent.NONE

    # -------------------------------------------------------------------------
    # Simulator data
    # -------------------------------------------------------------------------

    def on_startup_data(self, flight_date: date):
        with self._lock:
            self.session.flight_date = flight_date

    def on_aircraft_data(self, atc_id: str, atc_type: str, title: str):
        with self._lock:
            self.session.aircraft_id = _single_line(atc_id)
            self.session.aircraft_type = _single_line(atc_type)
            self.session.aircraft_title = _single_line(title)

    def on_cumulus_code(self, code: int):
        """The thermal generator reported its session code (0 = unlocked)."""
        with self._lock:
            self.session.locks.cumulus_code = int(code)

    def on_weather_changed(self):
        """The user touched the weather after the weather file was loaded."""
        with self._lock:
            self.session.locks.weather_locked = False

    def on_telemetry(self, sample: PositionSample) -> PhaseEvent:
        """One telemetry tick.

        Every tick drives the phase tracker; every TICK_COUNT-th tick is
        offered to the recorder.

        Returns:
            The phase event this tick produced
        """
        with self._lock:
            self._tick_counter += 1
            if not is_feature_enabled("FEATURE_TICK_DECIMATION") or self._tick_counter >= TICK_COUNT:
                self.recorder.accept(self.session, sample)
                self._tick_counter = 0

            event = self.session.tracker.update(sample.on_ground, sample.time_of_day)
            if event is not PhaseEvent.NONE:
                self.last_event = event
                emit_receipt(event.value, {
                    "time_of_day": sample.time_of_day,
                    "records": len(self.session.positions)
                }, silent=True)

        if event is PhaseEvent.LANDING and is_feature_enabled("FEATURE_AUTOSAVE_ON_LANDING"):
            self._autosave(REASON_LANDING)
        return event

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    def finalize(self, reason: str = REASON_MANUAL, now: Optional[datetime] = None) -> ComposedLog:
        """Compose the current session's log in memory.

        Raises:
            SessionTooShort: Not enough positions to be worth a log
            CompositionInProgress: Another finalize is still composing
        """
        with self._lock:
            if self._composing:
                raise CompositionInProgress("a log is already being composed for this session")
            self._composing = True
            if is_feature_enabled("FEATURE_THERMAL_FILE_CHECK"):
                self.session.locks.thermal_file_present = self.thermal_descriptions_path.exists()
            snapshot = replace(
                self.session,
                fingerprints=dict(self.session.fingerprints),
                locks=replace(self.session.locks),
                positions=list(self.session.positions),
            )

        try:
            return self.recorder.finalize(snapshot, reason, now, snapshot.positions)
        finally:
            with self._lock:
                self._composing = False

    def write_log(self, reason: str = REASON_MANUAL, now: Optional[datetime] = None) -> Path:
        """Finalize and write the log.

        Raises:
            SessionTooShort: Not enough positions to be worth a log
            FileError: The log could not be written
        """
        composed = self.finalize(reason, now)
        path = write_document(composed, self.log_directory)
        self.written.append(path)
        return path

    def _autosave(self, reason: str) -> Optional[Path]:
        """Write if there is enough to write; a short session is dropped quietly."""
        try:
            path = self.write_log(reason)
        except SessionTooShort:
            return None
        with self._lock:
            self._start_new_log()
        return path

    def on_quit(self) -> Optional[Path]:
        """Host is shutting down cleanly."""
        if not is_feature_enabled("FEATURE_AUTOSAVE_ON_QUIT"):
            return None
        return self._autosave(REASON_QUIT)

    def on_crash(self) -> Optional[Path]:
        """Host lost the simulator."""
        if not is_feature_enabled("FEATURE_AUTOSAVE_ON_CRASH"):
            return None
        return self._autosave(REASON_CRASH)


# Module-level logger instance
_default_logger: Optional[FlightLogger] = None


def get_logger() -> FlightLogger:
    """Get or create the default flight logger."""
    global _default_logger
    if _default_logger is None:
        _default_logger = FlightLogger()
    return _default_logger
