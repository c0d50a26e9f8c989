"""Ground/Airborne Phase Tracker

Watches the simulator's on-ground flag and reports takeoff and landing.
A touchdown only counts as a landing after MIN_FLIGHT_SECONDS airborne;
anything shorter is a bounce or an aborted takeoff and the tracker drops
back to GROUNDED without a signal.

The landing signal is advisory. What to do about it is the caller's call.
"""

from enum import Enum
from typing import Optional

from config.constants import MIN_PHASE_SAMPLES, MIN_FLIGHT_SECONDS


class GroundPhase(Enum):
    INITIALIZING = "initializing"
    GROUNDED = "grounded"
    AIRBORNE = "airborne"


class PhaseEvent(Enum):
    NONE = "none"
    TAKEOFF = "takeoff"
    LANDING = "landing"


class FlightPhaseTracker:
    """State machine over (on_ground, time_of_day) samples."""

    def __init__(self, min_samples: int = MIN_PHASE_SAMPLES,
                 min_flight_seconds: int = MIN_FLIGHT_SECONDS):
        self.min_samples = min_samples
        self.min_flight_seconds = min_flight_seconds
        self.reset()

    def reset(self):
        self.phase = GroundPhase.INITIALIZING
        self.samples_seen = 0
        self.takeoff_time: Optional[int] = None
        self._on_ground = True

    def update(self, on_ground: bool, time_of_day: int) -> PhaseEvent:
        """Advance the tracker by one sample.

        Args:
            on_ground: Simulator on-ground flag
            time_of_day: Seconds since midnight UTC

        Returns:
            TAKEOFF or LANDING when one just happened, NONE otherwise
        """
        self.samples_seen += 1

        if self.samples_seen <= self.min_samples:
            # Too early to trust a transition; just learn where we are
            self._on_ground = bool(on_ground)
            if self.samples_seen == self.min_samples:
                self.phase = GroundPhase.GROUNDED if self._on_ground else GroundPhase.AIRBORNE
                if not self._on_ground:
                    # Session started in the air
                    self.takeoff_time = time_of_day
            return PhaseEvent.NONE

        if self._on_ground and not on_ground:
            self._on_ground = False
            self.phase = GroundPhase.AIRBORNE
            self.takeoff_time = time_of_day
            return PhaseEvent.TAKEOFF

        if not self._on_ground and on_ground:
            self._on_ground = True
            self.phase = GroundPhase.GROUNDED
            if self.takeoff_time is not None and time_of_day - self.takeoff_time > self.min_flight_seconds:
                return PhaseEvent.LANDING
            return PhaseEvent.NONE

        return PhaseEvent.NONE
