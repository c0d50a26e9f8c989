"""sim_logger - Tamper-Evident Flight Logs for Flight Simulators

This package turns simulator telemetry into IGC-style flight logs whose
last line, the G record, is a checksum over everything above it. Anyone
can re-check a log; an edited position, header or fingerprint no longer
verifies.

Core Components:
- core: Foundation functions (dual_hash, emit_receipt, error types)
- checksum: The six-character rolling digest
- cfg_filter: Performance sections of aircraft.cfg
- fingerprint: Digests of the files a flight was flown with
- route: Flight plan to C records
- phase: Takeoff and landing detection
- session: Everything one flight's log is built from
- recorder: Position buffer and document composition
- verify: G record verification
- logger: Host event surface
- replay: CSV telemetry replay and track decoding
- dashboard: Streamlit log inspector
"""

__version__ = "1.18.0"
__author__ = "sim_logger Team"

from .core import (
    LoggerError,
    FileError,
    SessionTooShort,
    CompositionInProgress,
    dual_hash,
    emit_receipt,
)
from .checksum import ChecksumEngine, checksum, checksum_lines
from .session import FlightSession, PositionSample
from .recorder import LogRecorder, ComposedLog
from .verify import VerifyStatus, VerificationResult, verify_file, verify_text
from .logger import FlightLogger, get_logger
