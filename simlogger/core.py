"""Core Foundation Functions

Every other module imports from here. Foundation for:
- Dual hashing (SHA256 + BLAKE3) for the receipt ledger
- Receipt emission
- The error taxonomy
"""

import hashlib
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import blake3

RECEIPTS_FILE = Path(os.environ.get("RECEIPTS_FILE", "receipts.jsonl"))
LOGGER_ID = os.environ.get("SIM_LOGGER_ID", "sim-logger-001")

# Global receipt counter for ordering
_receipt_counter = 0


class LoggerError(Exception):
    """Base class for failures surfaced to the host."""


class FileError(LoggerError):
    """A path could not be read or written. Surfaced, never retried."""

    def __init__(self, path, operation: str = "read", reason: str = ""):
        self.path = Path(path)
        self.operation = operation
        self.reason = reason
        message = f"could not {operation} \"{self.path}\""
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SessionTooShort(LoggerError):
    """Finalize refused: too few position samples to be worth a log."""

    def __init__(self, records: int, minimum: int):
        self.records = records
        self.minimum = minimum
        super().__init__(f"session has {records} samples, need at least {minimum}")


class CompositionInProgress(LoggerError):
    """A second finalize arrived while the first was still composing."""


def dual_hash(data: bytes | str) -> str:
    """Compute SHA256:BLAKE3 dual hash.

    Args:
        data: Input bytes or string to hash

    Returns:
        String in format "sha256_hex:blake3_hex"
    """
    if isinstance(data, str):
        data = data.encode('utf-8')

    sha256_hash = hashlib.sha256(data).hexdigest()
    blake3_hash = blake3.blake3(data).hexdigest()

    return f"{sha256_hash}:{blake3_hash}"


def emit_receipt(receipt_type: str, data: dict,
                 logger_id: Optional[str] = None,
                 to_file: bool = True,
                 silent: bool = False) -> dict:
    """Emit a receipt to stdout and the JSONL ledger.

    Args:
        receipt_type: Type of receipt (fingerprint, log_written, anomaly, etc.)
        data: Receipt payload data
        logger_id: Override default logger ID
        to_file: Whether to append to the receipts file
        silent: Whether to suppress stdout printing

    Returns:
        Complete receipt dict with ts, logger_id, payload_hash
    """
    global _receipt_counter
    _receipt_counter += 1

    ts = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
    lid = logger_id or data.get("logger_id", LOGGER_ID)

    receipt = {
        "receipt_type": receipt_type,
        "ts": ts,
        "logger_id": lid,
        "sequence": _receipt_counter,
        **data
    }

    # Hash of the receipt without the hash itself
    data_for_hash = {k: v for k, v in receipt.items() if k != "payload_hash"}
    receipt["payload_hash"] = dual_hash(json.dumps(data_for_hash, sort_keys=True))

    receipt_json = json.dumps(receipt, sort_keys=True)

    if not silent:
        print(receipt_json, flush=True)

    if to_file:
        path = Path(os.environ.get("RECEIPTS_FILE", RECEIPTS_FILE))
        try:
            with open(path, "a") as f:
                f.write(receipt_json + "\n")
        except OSError:
            pass  # the ledger is best effort; the log itself is what counts

    return receipt


def emit_anomaly(error: Exception, metric: str, action: str = "surface") -> dict:
    """Emit anomaly receipt for a hard failure about to be raised.

    Args:
        error: The exception being surfaced
        metric: What failed (fingerprint, write_log, ...)
        action: What the caller is expected to do

    Returns:
        The anomaly receipt
    """
    return emit_receipt("anomaly", {
        "metric": metric,
        "classification": "violation",
        "action": action,
        "error": str(error)
    }, silent=True)


def load_receipts(file_path: Optional[Path] = None) -> list[dict]:
    """Load all receipts from the ledger file.

    Args:
        file_path: Path to receipts file, defaults to RECEIPTS_FILE

    Returns:
        List of receipt dicts
    """
    path = file_path or Path(os.environ.get("RECEIPTS_FILE", RECEIPTS_FILE))
    receipts = []

    try:
        with open(path, 'r') as f:
            for line in f:
                line = line.strip()
                if line:
                    receipts.append(json.loads(line))
    except FileNotFoundError:
        pass

    return receipts


def get_receipt_count() -> int:
    """Get the current receipt counter value."""
    return _receipt_counter


def reset_receipt_counter():
    """Reset the receipt counter (for testing)."""
    global _receipt_counter
    _receipt_counter = 0
