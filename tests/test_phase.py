"""Tests for takeoff and landing detection."""

from simlogger.phase import FlightPhaseTracker, GroundPhase, PhaseEvent


def feed(tracker, samples):
    """Run (on_ground, time) pairs through a tracker, return the events."""
    return [tracker.update(on_ground, t) for on_ground, t in samples]


class TestInitialization:
    """The first samples only learn the current state."""

    def test_starts_initializing(self):
        assert FlightPhaseTracker().phase is GroundPhase.INITIALIZING

    def test_learns_grounded(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101)])
        assert events == [PhaseEvent.NONE, PhaseEvent.NONE]
        assert tracker.phase is GroundPhase.GROUNDED
        assert tracker.takeoff_time is None

    def test_learns_airborne(self):
        """A session that starts in the air counts from its second sample."""
        tracker = FlightPhaseTracker()
        feed(tracker, [(False, 100), (False, 101)])
        assert tracker.phase is GroundPhase.AIRBORNE
        assert tracker.takeoff_time == 101

    def test_no_event_during_warmup(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (False, 101)])
        assert events == [PhaseEvent.NONE, PhaseEvent.NONE]
        assert tracker.phase is GroundPhase.AIRBORNE


class TestTransitions:
    """Takeoff and landing."""

    def test_takeoff(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101), (False, 102)])
        assert events[-1] is PhaseEvent.TAKEOFF
        assert tracker.takeoff_time == 102

    def test_landing_after_long_flight(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101), (False, 102), (False, 150), (True, 300)])
        assert events[-1] is PhaseEvent.LANDING
        assert tracker.phase is GroundPhase.GROUNDED

    def test_bounce_is_not_landing(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101), (False, 102), (True, 150)])
        assert events[-1] is PhaseEvent.NONE
        assert tracker.phase is GroundPhase.GROUNDED

    def test_exactly_threshold_is_bounce(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101), (False, 200), (True, 280)])
        assert events[-1] is PhaseEvent.NONE

    def test_one_second_over_threshold_lands(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, 100), (True, 101), (False, 200), (True, 281)])
        assert events[-1] is PhaseEvent.LANDING

    def test_landing_when_started_airborne(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(False, 1000), (False, 1001), (False, 1050), (True, 1200)])
        assert events[-1] is PhaseEvent.LANDING

    def test_steady_states_silent(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [(True, t) for t in range(100, 110)])
        assert all(e is PhaseEvent.NONE for e in events)

    def test_second_flight(self):
        tracker = FlightPhaseTracker()
        events = feed(tracker, [
            (True, 0), (True, 1),
            (False, 10), (True, 200),
            (False, 300), (True, 500),
        ])
        assert events.count(PhaseEvent.TAKEOFF) == 2
        assert events.count(PhaseEvent.LANDING) == 2


class TestReset:

    def test_reset_returns_to_initializing(self):
        tracker = FlightPhaseTracker()
        feed(tracker, [(True, 0), (True, 1), (False, 2)])
        tracker.reset()
        assert tracker.phase is GroundPhase.INITIALIZING
        assert tracker.samples_seen == 0
        assert tracker.takeoff_time is None

    def test_custom_thresholds(self):
        tracker = FlightPhaseTracker(min_samples=1, min_flight_seconds=10)
        events = feed(tracker, [(True, 0), (False, 1), (True, 20)])
        assert events == [PhaseEvent.NONE, PhaseEvent.TAKEOFF, PhaseEvent.LANDING]
