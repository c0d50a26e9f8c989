"""Scenario Simulation Harness for sim_logger

Provides validation framework with 5 mandatory scenarios:
1. BASELINE - Standard flight
2. BOUNCE - Landing debounce
3. LONG_HAUL - Record cap
4. DUPLICATES - Repeated timestamps
5. SHORT_SESSION - Minimum session length
"""

from .sim import SimConfig, SimState, SimResult, run_simulation, run_all_scenarios, generate_telemetry
from .scenarios import BASELINE, BOUNCE, LONG_HAUL, DUPLICATES, SHORT_SESSION, ALL_SCENARIOS
