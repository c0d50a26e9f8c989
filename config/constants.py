"""sim_logger Constants

Single source of truth for every table, cap, threshold and record layout.
No magic numbers in module code. The checksum constants are frozen: legacy
logs only verify while these stay bit-identical.
"""

import os
from pathlib import Path

# =============================================================================
# VERSION / IDENTITY
# =============================================================================

LOGGER_VERSION = 1.18
LOGGER_NAME = "sim_logger"

# =============================================================================
# CHECKSUM ENGINE
# =============================================================================

# Recognised characters, order matters (anything else is ignored)
CHECKSUM_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ.abcdefghijklmnopqrstuvwxyz"

# Permutation table, one entry per alphabet position
CHECKSUM_TABLE = (
    14, 46, 51, 8, 26, 2, 32, 39, 29,
    37, 4, 44, 20, 61, 22, 58, 16, 25,
    60, 13, 31, 53, 11, 50, 6, 38, 41,
    23, 56, 17, 1, 19, 45, 10, 28, 15,
    36, 9, 57, 12, 49, 33, 3, 24, 30,
    62, 47, 5, 43, 0, 27, 52, 34, 55,
    21, 54, 59, 18, 48, 35, 40, 7, 42,
)

CHECKSUM_INDEX_MODULUS = 1987  # index wraps here
CHECKSUM_INITIAL_INDEX = 1
DIGEST_WIDTH = 6               # characters in a rendered digest
DIGEST_RENDER_BASE = 36        # digits + uppercase
EMPTY_DIGEST = "0" * DIGEST_WIDTH  # placeholder for files that could not be read

# Read size for binary fingerprinting
FINGERPRINT_CHUNK_BYTES = 1000

# =============================================================================
# DOCUMENT LAYOUT
# =============================================================================

TRAILER_MARKER = "G"
POSITION_MARKER = "B"
ROUTE_MARKER = "C"

POSITION_FIX_FLAG = "A"        # 3D fix
POSITION_FIX_ACCURACY = 27     # FXA written on every B record
HEADER_FIX_ACCURACY = 35       # HFFXA
ENGINE_LEVEL_MAX = 999
ENGINE_LEVEL_RPM_CEILING = 9990
ENGINE_LEVEL_DIVISOR = 10
ALTITUDE_MAX = 99999           # five-digit altitude columns, below sea level writes 0

HARDWARE_VERSION = 2009
SIMULATOR_NAME = "Microsoft Flight Simulator"
GENERAL_CHECKSUM_TAG = "L FSX GENERAL CHECKSUM"

LOG_EXTENSION = ".igc"

# =============================================================================
# ROUTE (C RECORD) LAYOUT
# =============================================================================

ROUTE_COORD_WIDTH = 18             # "C" + DDMMmmmN + DDDMMmmmE
ROUTE_NAME_OFFSET = 18             # point names start right after the coordinate
ROUTE_DEFAULT_TITLE = "NO TASK"
ROUTE_TASK_FIELDS = "000000" + "0001"  # flight date (unset) + task number
ROUTE_MIN_WAYPOINTS = 2            # fewer than this and no C records are written
ROUTE_BLANK_COORD = "C0000000N00000000E"

# Characters allowed through from a route plan; everything else becomes a blank
ROUTE_SAFE_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz.<>, "

# =============================================================================
# AIRCRAFT CONFIG FILTER
# =============================================================================

# (section prefix, characters that must match)
PERFORMANCE_SECTIONS = (
    ("[airplane_geometry]", 5),
    ("[flaps.", 4),
    ("[flight_tuning]", 4),
    ("[water_ballast_system]", 3),
    ("[weight_and_balance]", 3),
    ("[generalenginedata]", 11),
    ("[jet_engine]", 4),
    ("[piston_engine]", 4),
    ("[propeller]", 4),
    ("[turbineenginedata]", 6),
    ("[turboprop_engine]", 6),
)
SECTION_BRACKET_SCAN = 10  # '[' must appear within this many leading chars

AIRCRAFT_CONFIG_NAME = "aircraft.cfg"

# =============================================================================
# RECORDING
# =============================================================================

MAX_RECORDS = 40000          # B record cap per session
MIN_RECORDS = 4              # refuse to write a log with fewer samples
TICK_COUNT = 4               # keep every Nth telemetry tick
MIN_PHASE_SAMPLES = 2        # phase tracker just watches until this many samples
MIN_FLIGHT_SECONDS = 80      # shorter airborne intervals are bounces
SECONDS_PER_DAY = 86400

# Finalize reasons
REASON_MANUAL = ""
REASON_QUIT = "autosave on quit"
REASON_CRASH = "autosave on sim crash"
REASON_LANDING = "autosave on landing"

# =============================================================================
# COMPANION FILES
# =============================================================================

FILE_FLIGHT = "flt"
FILE_AIRCRAFT = "air"
FILE_WEATHER = "wx"
FILE_CUMULUS = "cmx"
FILE_CONFIG = "cfg"
FILE_MISSION = "xml"

# Order used by the general checksum
AGGREGATE_ORDER = (FILE_FLIGHT, FILE_AIRCRAFT, FILE_WEATHER, FILE_CUMULUS, FILE_CONFIG, FILE_MISSION)

# Extension swaps applied to the flight file path
FLIGHT_COMPANIONS = {
    FILE_WEATHER: ".WX",
    FILE_CUMULUS: ".CMX",
    FILE_MISSION: ".XML",
}

# (kind, label padded to the checksum column) in document order
FINGERPRINT_LINES = (
    (FILE_FLIGHT, "FLT checksum            "),
    (FILE_WEATHER, "WX checksum             "),
    (FILE_CUMULUS, "CMX checksum            "),
    (FILE_MISSION, "mission checksum        "),
    (FILE_CONFIG, "aircraft.cfg checksum   "),
    (FILE_AIRCRAFT, "AIR checksum            "),
)

FILE_NOT_FOUND_NAME = "not found"

THERMAL_DESCRIPTIONS_PATH = Path(os.environ.get("SIM_LOGGER_THERMALS", "ThermalDescriptions.xml"))

# Lock labels fed to the general checksum
CUMULUS_LABELS = ("CX UNLOCKED", "CX LOCKED")
WEATHER_LABELS = ("WX UNLOCKED", "WX LOCKED")
THERMAL_LABELS = ("THERM FILE PRESENT", "NO THERM FILE")

# =============================================================================
# OUTPUT
# =============================================================================

LOG_DIRECTORY = Path(os.environ.get("SIM_LOGGER_LOG_DIR", "logs"))

# =============================================================================
# WATCHDOG
# =============================================================================

WATCHDOG_INTERVAL_S = 60
