"""Tests for the host event surface."""

import threading
from datetime import date, datetime

import pytest

from config.features import disable_feature, enable_feature
from simlogger.checksum import checksum
from simlogger.core import CompositionInProgress, FileError, SessionTooShort, dual_hash, load_receipts
from simlogger.logger import FlightLogger, get_logger, write_document
from simlogger.phase import PhaseEvent
from simlogger.recorder import ComposedLog, LogRecorder
from simlogger.route import RoutePlan
from simlogger.verify import verify_file


def fly(logger, make_sample, ticks, start=43200, on_ground=False):
    """Send one tick per second."""
    return [logger.on_telemetry(make_sample(start + i, on_ground=on_ground)) for i in range(ticks)]


class TestFileLoads:
    """Fingerprinting on flight and aircraft loads."""

    def test_flight_and_companions(self, flight_logger, flight_files):
        flight_logger.on_flight_loaded(flight_files["flight"])
        session = flight_logger.session
        assert session.fingerprint("flt").digest != "000000"
        assert session.fingerprint("flt").name == "flights/Task1.FLT"
        assert session.fingerprint("wx").name == "flights/Task1.WX"
        assert session.fingerprint("xml").name == "flights/Task1.XML"

    def test_missing_companion_placeholder(self, flight_logger, flight_files):
        flight_logger.on_flight_loaded(flight_files["flight"])
        cmx = flight_logger.session.fingerprint("cmx")
        assert cmx.digest == "000000"
        assert cmx.name == "not found"

    def test_weather_file_locks_weather(self, flight_logger, flight_files):
        flight_logger.on_flight_loaded(flight_files["flight"])
        assert flight_logger.session.locks.weather_locked

    def test_no_weather_file_unlocked(self, flight_logger, flight_files):
        flight_files["flight"].with_suffix(".WX").unlink()
        flight_logger.on_flight_loaded(flight_files["flight"])
        assert not flight_logger.session.locks.weather_locked

    def test_weather_change_unlocks(self, flight_logger, flight_files):
        flight_logger.on_flight_loaded(flight_files["flight"])
        flight_logger.on_weather_changed()
        assert not flight_logger.session.locks.weather_locked

    def test_missing_flight_file(self, flight_logger, tmp_path):
        flight_logger.on_flight_loaded(tmp_path / "gone.FLT")
        assert flight_logger.session.fingerprint("flt").digest == "000000"

    def test_aircraft_and_config(self, flight_logger, flight_files):
        flight_logger.on_aircraft_loaded(flight_files["aircraft"])
        session = flight_logger.session
        assert session.fingerprint("air").digest == checksum("AIRDATA")
        assert session.fingerprint("cfg").digest == "QMNO05"
        assert session.fingerprint("cfg").name == "DG808S/aircraft.cfg"

    def test_load_resets_positions(self, flight_logger, flight_files, make_sample):
        fly(flight_logger, make_sample, 20)
        assert flight_logger.session.positions
        flight_logger.on_flight_loaded(flight_files["flight"])
        assert flight_logger.session.positions == []

    def test_fingerprint_receipts(self, flight_logger, flight_files):
        flight_logger.on_flight_loaded(flight_files["flight"])
        receipts = [r for r in load_receipts() if r["receipt_type"] == "fingerprint"]
        assert {r["kind"] for r in receipts} == {"flt", "wx", "cmx", "xml"}


class TestFlightPlan:
    """Route loading."""

    def test_plan_loaded(self, flight_logger, tmp_path):
        path = tmp_path / "task.PLN"
        path.write_text('<Title>Task</Title>\n<ATCWaypoint id="A">\n<ATCWaypoint id="B">\n')
        flight_logger.on_flight_plan_loaded(path, datetime(2024, 6, 1, 12, 0))
        assert isinstance(flight_logger.session.route, RoutePlan)
        assert flight_logger.session.route.title == "Task"

    def test_unreadable_plan_clears_route(self, flight_logger, tmp_path):
        flight_logger.on_flight_plan_loaded(tmp_path / "none.PLN")
        assert flight_logger.session.route is None


class TestSimulatorData:
    """Identity and lock inputs."""

    def test_aircraft_data(self, flight_logger):
        flight_logger.on_aircraft_data("D-KXYZ", "DG808S", "DG-808S\nInjected")
        session = flight_logger.session
        assert session.aircraft_id == "D-KXYZ"
        assert "\n" not in session.aircraft_title

    def test_startup_date(self, flight_logger):
        flight_logger.on_startup_data(date(2023, 7, 14))
        assert flight_logger.session.flight_date == date(2023, 7, 14)

    def test_cumulus_code(self, flight_logger):
        flight_logger.on_cumulus_code(4711)
        assert flight_logger.session.locks.cumulus_locked
        flight_logger.on_cumulus_code(0)
        assert not flight_logger.session.locks.cumulus_locked


class TestTelemetry:
    """Tick decimation and phase events."""

    def test_every_fourth_tick_recorded(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 20)
        times = [p.time_of_day for p in flight_logger.session.positions]
        assert times == [43203, 43207, 43211, 43215, 43219]

    def test_decimation_disabled(self, flight_logger, make_sample):
        disable_feature("FEATURE_TICK_DECIMATION")
        fly(flight_logger, make_sample, 6)
        assert len(flight_logger.session.positions) == 6

    def test_decimation_env_override(self, flight_logger, make_sample, monkeypatch):
        monkeypatch.setenv("SIM_LOGGER_FEATURE_TICK_DECIMATION", "0")
        fly(flight_logger, make_sample, 6)
        assert len(flight_logger.session.positions) == 6

    def test_every_tick_drives_phase(self, flight_logger, make_sample):
        events = fly(flight_logger, make_sample, 3, on_ground=True)
        events.append(flight_logger.on_telemetry(make_sample(43203, on_ground=False)))
        assert events[-1] is PhaseEvent.TAKEOFF
        assert flight_logger.last_event is PhaseEvent.TAKEOFF

    def test_landing_event(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 5, on_ground=True)
        fly(flight_logger, make_sample, 100, start=43205)
        event = flight_logger.on_telemetry(make_sample(43400, on_ground=True))
        assert event is PhaseEvent.LANDING

    def test_landing_autosave_off_by_default(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 5, on_ground=True)
        fly(flight_logger, make_sample, 100, start=43205)
        flight_logger.on_telemetry(make_sample(43400, on_ground=True))
        assert flight_logger.written == []

    def test_landing_autosave_on(self, flight_logger, make_sample):
        enable_feature("FEATURE_AUTOSAVE_ON_LANDING")
        fly(flight_logger, make_sample, 5, on_ground=True)
        fly(flight_logger, make_sample, 100, start=43205)
        flight_logger.on_telemetry(make_sample(43400, on_ground=True))
        assert len(flight_logger.written) == 1
        assert "(autosave on landing)" in flight_logger.written[0].name
        assert flight_logger.session.positions == []


class TestWriteLog:
    """Finalize and write."""

    def test_write_and_verify(self, flight_logger, make_sample):
        flight_logger.on_aircraft_data("D-KXYZ", "DG808S", "DG-808S")
        fly(flight_logger, make_sample, 40)
        path = flight_logger.write_log(now=datetime(2024, 6, 1, 14, 30))
        assert path.exists()
        assert path.name == "D-KXYZ__2024-06-01_1430.igc"
        assert verify_file(path).ok

    def test_too_short(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 12)
        with pytest.raises(SessionTooShort):
            flight_logger.write_log()

    def test_thermal_file_checked_at_write(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 40)
        text = flight_logger.finalize(now=datetime(2024, 6, 1)).text
        assert "ThermalDescriptions.xml REMOVED OK" in text

        flight_logger.thermal_descriptions_path.write_text("<thermals/>")
        text = flight_logger.finalize(now=datetime(2024, 6, 1)).text
        assert "ThermalDescriptions.xml STILL BEING USED" in text

    def test_thermal_check_disabled(self, flight_logger, make_sample):
        disable_feature("FEATURE_THERMAL_FILE_CHECK")
        fly(flight_logger, make_sample, 40)
        text = flight_logger.finalize(now=datetime(2024, 6, 1)).text
        assert "STILL BEING USED" in text

    def test_written_receipt_hash(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 40)
        path = flight_logger.write_log(now=datetime(2024, 6, 1, 14, 30))
        receipt = [r for r in load_receipts() if r["receipt_type"] == "log_written"][-1]
        assert receipt["path"] == str(path)
        assert receipt["document_hash"] == dual_hash(path.read_text(encoding="latin-1"))

    def test_unwritable_directory(self, tmp_path, make_sample):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a folder")
        logger = FlightLogger(log_directory=blocker / "logs")
        fly(logger, make_sample, 40)
        with pytest.raises(FileError) as excinfo:
            logger.write_log()
        assert excinfo.value.operation == "write"
        assert any(r["receipt_type"] == "anomaly" for r in load_receipts())


class TestQuitAndCrash:
    """Autosave on shutdown."""

    def test_quit_writes(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 40)
        path = flight_logger.on_quit()
        assert path is not None
        assert "(autosave on quit)" in path.name
        assert flight_logger.session.positions == []

    def test_crash_writes(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 40)
        path = flight_logger.on_crash()
        assert "(autosave on sim crash)" in path.name

    def test_quit_short_session_silent(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 8)
        assert flight_logger.on_quit() is None
        assert flight_logger.written == []

    def test_quit_disabled(self, flight_logger, make_sample):
        disable_feature("FEATURE_AUTOSAVE_ON_QUIT")
        fly(flight_logger, make_sample, 40)
        assert flight_logger.on_quit() is None


class SlowRecorder(LogRecorder):
    """Recorder that blocks inside finalize until released."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def finalize(self, session, reason="", now=None, positions=None):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().finalize(session, reason, now, positions)


class TestConcurrency:
    """One composition per session at a time."""

    def test_second_finalize_rejected(self, tmp_path, make_sample):
        recorder = SlowRecorder()
        logger = FlightLogger(log_directory=tmp_path, recorder=recorder)
        fly(logger, make_sample, 40)

        results = {}
        worker = threading.Thread(target=lambda: results.setdefault("first", logger.finalize()))
        worker.start()
        assert recorder.entered.wait(timeout=5)

        with pytest.raises(CompositionInProgress):
            logger.finalize()

        recorder.release.set()
        worker.join(timeout=5)
        assert isinstance(results["first"], ComposedLog)

    def test_telemetry_not_blocked_by_composition(self, tmp_path, make_sample):
        recorder = SlowRecorder()
        logger = FlightLogger(log_directory=tmp_path, recorder=recorder)
        fly(logger, make_sample, 40)

        worker = threading.Thread(target=logger.finalize)
        worker.start()
        assert recorder.entered.wait(timeout=5)

        fly(logger, make_sample, 8, start=50000)
        recorder.release.set()
        worker.join(timeout=5)
        assert len(logger.session.positions) == 12

    def test_metadata_taken_when_finalize_starts(self, tmp_path, make_sample):
        recorder = SlowRecorder()
        logger = FlightLogger(log_directory=tmp_path, recorder=recorder)
        logger.on_aircraft_data("D-OLD", "DG808S", "Old Title")
        fly(logger, make_sample, 40)

        results = {}
        worker = threading.Thread(target=lambda: results.setdefault("log", logger.finalize()))
        worker.start()
        assert recorder.entered.wait(timeout=5)

        logger.on_aircraft_data("D-NEW", "LS8", "New Title")
        logger.on_cumulus_code(1234)
        recorder.release.set()
        worker.join(timeout=5)

        text = results["log"].text
        assert "HFGIDGLIDERID:D-OLD\n" in text
        assert "D-NEW" not in text
        assert "L FSX CumulusX status:        UNLOCKED\n" in text
        assert logger.session.aircraft_id == "D-NEW"
        assert logger.session.locks.cumulus_code == 1234

    def test_finalize_allowed_again_after_failure(self, flight_logger, make_sample):
        fly(flight_logger, make_sample, 8)
        with pytest.raises(SessionTooShort):
            flight_logger.finalize()
        fly(flight_logger, make_sample, 40, start=50000)
        assert flight_logger.finalize().records >= 4


class TestWriteDocument:

    def test_creates_folder(self, tmp_path):
        composed = ComposedLog("AXXX\nG012345\n", "x.igc", 0, "012345")
        path = write_document(composed, tmp_path / "a" / "b")
        assert path.read_text() == "AXXX\nG012345\n"


def test_get_logger_singleton():
    assert get_logger() is get_logger()
