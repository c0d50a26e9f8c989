"""Mandatory Validation Scenarios

No release without ALL scenarios passing.
Ticks arrive once a second; every fourth tick is offered to the recorder.
"""

from .sim import SimConfig

# SCENARIO 1: BASELINE
# Ground roll, one flight, landing. 480 ticks -> 120 records
BASELINE = SimConfig(
    name="BASELINE",
    random_seed=42,
    flight_profile={
        "ground_before": 40,
        "airborne": 400,
        "ground_after": 40
    },
    success_criteria={
        "trailer_verifies": True,
        "buffer_invariants": True,
        "expected_landings": 1,
        "expected_records": 120
    },
    description="Standard flight, log verifies and an edit is caught"
)

# SCENARIO 2: BOUNCE
# A 30 s hop before the real flight must not count as a landing
BOUNCE = SimConfig(
    name="BOUNCE",
    random_seed=123,
    flight_profile={
        "ground_before": 40,
        "bounce": 30,
        "ground_between": 20,
        "airborne": 400,
        "ground_after": 40
    },
    success_criteria={
        "trailer_verifies": True,
        "buffer_invariants": True,
        "expected_landings": 1
    },
    description="Short hop is debounced, only the real landing is signalled"
)

# SCENARIO 3: LONG_HAUL
# More ticks than the recorder cap allows
LONG_HAUL = SimConfig(
    name="LONG_HAUL",
    random_seed=456,
    flight_profile={
        "ground_before": 40,
        "airborne": 3000,
        "ground_after": 40,
        "max_records": 500
    },
    success_criteria={
        "trailer_verifies": True,
        "buffer_invariants": True,
        "expected_landings": 1,
        "expected_records": 500
    },
    description="Buffer stops at the cap, log still verifies"
)

# SCENARIO 4: DUPLICATES
# Simulator repeats every timestamp eight times
DUPLICATES = SimConfig(
    name="DUPLICATES",
    random_seed=789,
    flight_profile={
        "ground_before": 40,
        "airborne": 400,
        "ground_after": 40,
        "repeat": 8
    },
    success_criteria={
        "trailer_verifies": True,
        "buffer_invariants": True,
        "expected_records": 480
    },
    description="Repeated timestamps are recorded once"
)

# SCENARIO 5: SHORT_SESSION
# Eight ticks -> two records, nothing to write
SHORT_SESSION = SimConfig(
    name="SHORT_SESSION",
    random_seed=1011,
    flight_profile={
        "ground_before": 8,
        "airborne": 0,
        "ground_after": 0
    },
    success_criteria={
        "expect_too_short": True
    },
    description="Finalize refuses a session below the minimum"
)


ALL_SCENARIOS = [BASELINE, BOUNCE, LONG_HAUL, DUPLICATES, SHORT_SESSION]


def get_scenario_by_name(name: str) -> SimConfig:
    """Get scenario by name.

    Args:
        name: Scenario name

    Returns:
        SimConfig for the scenario

    Raises:
        ValueError: If scenario not found
    """
    for scenario in ALL_SCENARIOS:
        if scenario.name == name:
            return scenario
    raise ValueError(f"Scenario '{name}' not found")


def list_scenarios() -> list[str]:
    """List all scenario names."""
    return [s.name for s in ALL_SCENARIOS]
