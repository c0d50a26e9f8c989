"""Companion File Fingerprints

Digests of the files a flight was flown with (flight, aircraft, weather,
thermal config, mission, aircraft.cfg). They go into the log so a reviewer
can compare them with the files a task was published with.
"""

from pathlib import Path
from typing import Callable, Iterable, Optional

from config.constants import FINGERPRINT_CHUNK_BYTES, FILE_NOT_FOUND_NAME
from .checksum import ChecksumState, absorb_bytes, absorb_string, to_digest_string
from .core import FileError

LineFilter = Callable[[str], bool]


def fingerprint_binary(path) -> str:
    """Digest every byte of a file.

    Args:
        path: File to read

    Returns:
        Digest string

    Raises:
        FileError: If the file cannot be opened or read
    """
    state = ChecksumState()
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(FINGERPRINT_CHUNK_BYTES)
                if not chunk:
                    break
                absorb_bytes(state, chunk)
    except OSError as e:
        raise FileError(path, "read", e.strerror or str(e)) from e
    return to_digest_string(state)


def fingerprint_filtered_text(path, line_filter: Optional[LineFilter] = None) -> str:
    """Digest the lines of a text file that a filter lets through.

    Args:
        path: File to read
        line_filter: Called once per line in order; absorb when True.
            None absorbs every line.

    Returns:
        Digest string

    Raises:
        FileError: If the file cannot be opened or read
    """
    state = ChecksumState()
    try:
        # latin-1 maps every byte, and non-ASCII never reaches the digest anyway
        with open(path, "r", encoding="latin-1", newline="") as f:
            for line in f:
                if line_filter is None or line_filter(line):
                    absorb_string(state, line)
    except OSError as e:
        raise FileError(path, "read", e.strerror or str(e)) from e
    return to_digest_string(state)


def fingerprint_aggregate(digests: Iterable[str], labels: Iterable[str]) -> str:
    """The general checksum: one digest over fingerprints and lock labels.

    Never touches file bytes, so a reviewer can recompute it from the log
    alone.
    """
    state = ChecksumState()
    for digest in digests:
        absorb_string(state, digest)
    for label in labels:
        absorb_string(state, label)
    return to_digest_string(state)


def display_name(path) -> str:
    """Short "folder/file" name shown next to a fingerprint.

    Returns:
        The last two path components, or "not found" if the file is missing
    """
    if path is None:
        return FILE_NOT_FOUND_NAME
    path = Path(path)
    if not path.exists():
        return FILE_NOT_FOUND_NAME
    return "/".join(path.parts[-2:])
