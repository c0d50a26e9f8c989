"""Pytest configuration and fixtures for sim_logger tests."""

import os
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment
os.environ["RECEIPTS_FILE"] = str(Path(tempfile.gettempdir()) / "test_sim_logger_receipts.jsonl")


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    """Reset global state before each test."""
    from simlogger.core import reset_receipt_counter
    from config.features import reset_features, get_all_features

    reset_receipt_counter()
    reset_features()
    for name in get_all_features():
        monkeypatch.delenv(f"SIM_LOGGER_{name}", raising=False)

    # Clear receipts file
    receipts_path = Path(os.environ.get("RECEIPTS_FILE", "receipts.jsonl"))
    if receipts_path.exists():
        receipts_path.unlink()

    yield

    reset_features()
    if receipts_path.exists():
        receipts_path.unlink()


@pytest.fixture
def fixed_now():
    """Composition time used wherever a test needs stable output."""
    return datetime(2024, 6, 1, 14, 30)


@pytest.fixture
def make_sample():
    """Factory for position samples."""
    from simlogger.session import PositionSample

    def _make(t, on_ground=False, lat=51.5, lon=-1.25, alt=300.0, rpm=0):
        return PositionSample(t, lat, lon, alt, on_ground, rpm)

    return _make


@pytest.fixture
def session(make_sample):
    """A session with identity data and five positions."""
    from simlogger.session import FlightSession

    s = FlightSession(
        aircraft_id="D-KXYZ",
        aircraft_type="DG808S",
        aircraft_title="DG Flugzeugbau DG-808S",
        flight_date=date(2024, 6, 1),
    )
    s.positions = [make_sample(43200 + i, alt=300.0 + i) for i in range(5)]
    return s


@pytest.fixture
def flight_files(tmp_path):
    """A flight file with weather and mission companions, and an aircraft folder."""
    flight = tmp_path / "flights" / "Task1.FLT"
    flight.parent.mkdir()
    flight.write_bytes(b"[Main]\nTitle=Task1\n")
    flight.with_suffix(".WX").write_bytes(b"WEATHER\n")
    flight.with_suffix(".XML").write_bytes(b"<Mission/>\n")

    aircraft_dir = tmp_path / "aircraft" / "DG808S"
    aircraft_dir.mkdir(parents=True)
    air = aircraft_dir / "DG808S.air"
    air.write_bytes(b"\x00\x01AIRDATA\xff")
    (aircraft_dir / "aircraft.cfg").write_text(
        "[fltsim.0]\ntitle=DG808S\n[flaps.1]\ntype=1\nspan=2.5\n[sound]\nvolume=3\npitch=4\n"
    )

    return {"flight": flight, "aircraft": air, "dir": tmp_path}


@pytest.fixture
def flight_logger(tmp_path):
    """A FlightLogger writing into a temp folder, thermal file absent."""
    from simlogger.logger import FlightLogger
    return FlightLogger(
        log_directory=tmp_path / "logs",
        thermal_descriptions_path=tmp_path / "ThermalDescriptions.xml",
    )
