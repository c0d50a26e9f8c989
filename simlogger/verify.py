"""Log Verification - does the G record still match?

Recomputes the checksum over every line that precedes the first G record
and compares it with the digest the G record carries. Any edit to a
position, a header or a fingerprint line changes the computed value.
"""

import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from config.constants import DIGEST_WIDTH, TRAILER_MARKER, GENERAL_CHECKSUM_TAG
from .checksum import ChecksumState, absorb_string, to_digest_string
from .core import emit_receipt


class VerifyStatus(Enum):
    """Outcome of a verification. Never raised, always reported."""
    OK = "ok"
    NOT_FOUND = "trailer_not_found"
    TOO_SHORT = "trailer_too_short"
    MISMATCH = "checksum_mismatch"
    FILE_ERROR = "file_error"


_MESSAGES = {
    VerifyStatus.OK: "Log file checks OK.",
    VerifyStatus.TOO_SHORT: "BAD CHECKSUM. This file contains a checksum but it is too short.",
    VerifyStatus.NOT_FOUND: "BAD CHECKSUM. This file does not contain a 'G' record.",
    VerifyStatus.MISMATCH: "BAD CHECKSUM. 'G' record found but checksum is wrong.",
    VerifyStatus.FILE_ERROR: "FILE ERROR. Couldn't read the log file \"{path}\".",
}


@dataclass
class VerificationResult:
    """Result of checking one document."""
    status: VerifyStatus
    lines_checked: int = 0
    expected: Optional[str] = None   # digest carried by the G record
    computed: Optional[str] = None   # digest of the preceding lines
    general_checksum_line: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is VerifyStatus.OK


def verify_trailer_document(lines: Iterable[str]) -> VerificationResult:
    """Check a document given as lines (with or without line endings).

    Args:
        lines: Document lines in order

    Returns:
        VerificationResult
    """
    state = ChecksumState()
    lines_checked = 0
    general_line = None
    trailer = None

    for line in lines:
        if line.startswith(TRAILER_MARKER):
            trailer = line.rstrip("\r\n")
            break
        if line.startswith(GENERAL_CHECKSUM_TAG):
            general_line = line.rstrip("\r\n")
        absorb_string(state, line)
        lines_checked += 1

    if trailer is None:
        return VerificationResult(VerifyStatus.NOT_FOUND, lines_checked,
                                  general_checksum_line=general_line)

    if len(trailer) < DIGEST_WIDTH + 1:
        return VerificationResult(VerifyStatus.TOO_SHORT, lines_checked,
                                  expected=trailer[1:],
                                  general_checksum_line=general_line)

    computed = to_digest_string(state)
    expected = trailer[1:DIGEST_WIDTH + 1]
    status = VerifyStatus.OK if computed == expected else VerifyStatus.MISMATCH

    return VerificationResult(status, lines_checked, expected, computed, general_line)


def verify_text(text: str) -> VerificationResult:
    """Check an in-memory document."""
    # Split on "\n" only, the way the log was written
    return verify_trailer_document(io.StringIO(text, newline="\n"))


def verify_file(path) -> VerificationResult:
    """Check a document on disk.

    Read failures come back as FILE_ERROR rather than an exception so a
    batch of files can be checked in one pass.
    """
    try:
        with open(path, "r", encoding="latin-1", newline="\n") as f:
            result = verify_trailer_document(f)
    except OSError as e:
        result = VerificationResult(VerifyStatus.FILE_ERROR)
        emit_receipt("verification", {
            "path": str(path),
            "result": result.status.value,
            "error": str(e)
        }, silent=True)
        return result

    emit_receipt("verification", {
        "path": str(path),
        "result": result.status.value,
        "lines_checked": result.lines_checked,
        "expected": result.expected,
        "computed": result.computed
    }, silent=True)
    return result


def describe(result: VerificationResult, path=None) -> str:
    """Human-readable one-line verdict."""
    return _MESSAGES[result.status].format(path=Path(path) if path else "")


def format_verification(result: VerificationResult, path=None) -> str:
    """Verdict plus the general checksum line for terminal display."""
    lines = [""]
    if result.general_checksum_line:
        lines.append(f"  {result.general_checksum_line}")
        lines.append("")
    lines.append(f"  {describe(result, path)}")
    if result.status is VerifyStatus.MISMATCH:
        lines.append(f"    G record: {result.expected}")
        lines.append(f"    Computed: {result.computed}")
    lines.append("")
    return "\n".join(lines)
