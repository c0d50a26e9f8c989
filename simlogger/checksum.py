"""Rolling Substitution Checksum

The tamper-evidence primitive used for companion-file fingerprints, the
general checksum and the G record trailer. It is NOT cryptographic: it only
has to catch casual edits and stay bit-identical with every log ever written.

Characters outside the 63-character alphabet are ignored outright: they
advance neither the index nor the digest. Whitespace, punctuation and line
endings therefore never influence a digest.
"""

from dataclasses import dataclass, field
from typing import Iterable

from config.constants import (
    CHECKSUM_ALPHABET,
    CHECKSUM_TABLE,
    CHECKSUM_INDEX_MODULUS,
    CHECKSUM_INITIAL_INDEX,
    DIGEST_WIDTH,
    DIGEST_RENDER_BASE,
)

_ALPHABET_SIZE = len(CHECKSUM_ALPHABET)
_POSITIONS = {ch: pos for pos, ch in enumerate(CHECKSUM_ALPHABET)}
_RENDER_CHARS = CHECKSUM_ALPHABET[:DIGEST_RENDER_BASE]


@dataclass
class ChecksumState:
    """Accumulator for one checksum computation."""
    index: int = CHECKSUM_INITIAL_INDEX
    digest: list[int] = field(default_factory=lambda: list(range(DIGEST_WIDTH)))


def absorb(state: ChecksumState, ch: str) -> ChecksumState:
    """Fold one character into the state.

    Args:
        state: Accumulator, mutated in place
        ch: Single character

    Returns:
        The same state, for chaining
    """
    pos = _POSITIONS.get(ch)
    if pos is None:
        return state

    mapped = CHECKSUM_TABLE[(pos + state.index) % _ALPHABET_SIZE]
    digest = state.digest
    for i in range(DIGEST_WIDTH):
        digest[i] = CHECKSUM_TABLE[(digest[i] + mapped + i) % _ALPHABET_SIZE]

    state.index = (state.index + 1) % CHECKSUM_INDEX_MODULUS
    return state


def absorb_string(state: ChecksumState, text: str) -> ChecksumState:
    """Fold every character of text into the state, in order."""
    for ch in text:
        absorb(state, ch)
    return state


def absorb_bytes(state: ChecksumState, data: bytes) -> ChecksumState:
    """Fold raw bytes into the state.

    Each byte is looked up as the character with the same code point, so
    only ASCII bytes that belong to the alphabet contribute.
    """
    for byte in data:
        absorb(state, chr(byte))
    return state


def to_digest_string(state: ChecksumState) -> str:
    """Render the state as a DIGEST_WIDTH-character string."""
    return "".join(_RENDER_CHARS[value % DIGEST_RENDER_BASE] for value in state.digest)


def checksum(text: str) -> str:
    """One-shot digest of a string."""
    return to_digest_string(absorb_string(ChecksumState(), text))


def checksum_lines(lines: Iterable[str]) -> str:
    """One-shot digest of the concatenation of lines."""
    state = ChecksumState()
    for line in lines:
        absorb_string(state, line)
    return to_digest_string(state)


class ChecksumEngine:
    """Incremental checksum, for callers that feed data piece by piece.

    Example:
        >>> engine = ChecksumEngine()
        >>> engine.update("A")
        >>> engine.update("B")
        >>> engine.digest()
        'KBOK06'
    """

    def __init__(self):
        self._state = ChecksumState()

    def update(self, text: str):
        absorb_string(self._state, text)

    def update_bytes(self, data: bytes):
        absorb_bytes(self._state, data)

    def digest(self) -> str:
        return to_digest_string(self._state)

    def reset(self):
        self._state = ChecksumState()

    @property
    def state(self) -> ChecksumState:
        return self._state
