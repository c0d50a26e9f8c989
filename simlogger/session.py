"""Flight Session - everything one flight's log is built from.

A session is plain data. The host-facing FlightLogger owns one and passes
it to the recorder; nothing here touches the file system.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from config.constants import (
    EMPTY_DIGEST,
    FILE_NOT_FOUND_NAME,
    AGGREGATE_ORDER,
    CUMULUS_LABELS,
    WEATHER_LABELS,
    THERMAL_LABELS,
)
from .phase import FlightPhaseTracker, GroundPhase
from .route import RoutePlan


@dataclass(frozen=True)
class PositionSample:
    """One accepted telemetry tick."""
    time_of_day: int       # seconds since midnight UTC, [0, 86400)
    latitude: float        # degrees, north positive
    longitude: float       # degrees, east positive
    altitude: float        # meters
    on_ground: bool = False
    engine_rpm: int = 0


@dataclass
class Fingerprint:
    """Digest of one companion file plus its short display name."""
    digest: str = EMPTY_DIGEST
    name: str = FILE_NOT_FOUND_NAME
    path: Optional[Path] = None


@dataclass
class LockStatus:
    """External lock inputs, recorded as given and never derived from file bytes.

    cumulus_code: non-zero once the thermal generator reports a locked session
    weather_locked: a weather file was loaded and the user has not touched
        the weather since
    thermal_file_present: the stock thermal descriptions file is still in use
    """
    cumulus_code: int = 0
    weather_locked: bool = False
    thermal_file_present: bool = True

    @property
    def cumulus_locked(self) -> bool:
        return self.cumulus_code != 0

    def labels(self) -> list[str]:
        """Labels fed to the general checksum, in fixed order."""
        return [
            CUMULUS_LABELS[self.cumulus_locked],
            WEATHER_LABELS[self.weather_locked],
            THERMAL_LABELS[not self.thermal_file_present],
        ]


@dataclass
class FlightSession:
    """In-memory record of one flight, from load to finalize."""
    aircraft_id: str = ""
    aircraft_type: str = ""
    aircraft_title: str = ""
    flight_date: Optional[date] = None
    flight_path: Optional[Path] = None
    fingerprints: dict[str, Fingerprint] = field(default_factory=dict)
    locks: LockStatus = field(default_factory=LockStatus)
    route: Optional[RoutePlan] = None
    positions: list[PositionSample] = field(default_factory=list)
    tracker: FlightPhaseTracker = field(default_factory=FlightPhaseTracker)

    @property
    def phase(self) -> GroundPhase:
        return self.tracker.phase

    def fingerprint(self, kind: str) -> Fingerprint:
        """Fingerprint for a file kind, placeholder if never computed."""
        return self.fingerprints.get(kind) or Fingerprint()

    def aggregate_inputs(self) -> tuple[list[str], list[str]]:
        """Fingerprint strings and lock labels for the general checksum."""
        digests = [self.fingerprint(kind).digest for kind in AGGREGATE_ORDER]
        return digests, self.locks.labels()

    def reset_positions(self):
        """Start a new log: drop buffered positions and the phase state."""
        self.positions = []
        self.tracker.reset()
