"""Aircraft Config Section Filter

Only the sections of an aircraft.cfg that change flight performance are
fingerprinted, so repainting a livery or renaming an aircraft never breaks
a pilot's logs. Sections are matched on a short prefix of their bracketed
name: "[flaps." covers every "[flaps.N]", "[jet" covers "[jet_engine]" and
any variant spelling that starts the same way.
"""

from typing import Sequence

from config.constants import PERFORMANCE_SECTIONS, SECTION_BRACKET_SCAN


def header_position(line: str) -> int:
    """Locate the '[' of a section header.

    Args:
        line: Raw config line

    Returns:
        Index of '[' if it is the first non-blank character within the
        first SECTION_BRACKET_SCAN characters, else -1
    """
    for i, ch in enumerate(line[:SECTION_BRACKET_SCAN]):
        if ch == "[":
            return i
        if ch != " ":
            return -1
    return -1


def matches_section(line: str, sections: Sequence[tuple[str, int]] = PERFORMANCE_SECTIONS) -> bool:
    """True if line is a header whose name starts like a listed section."""
    pos = header_position(line)
    if pos < 0:
        return False
    for prefix, length in sections:
        if line[pos:pos + length] == prefix[:length]:
            return True
    return False


class ConfigFilter:
    """Stateful line filter: pass data lines of relevant sections only.

    Header lines are never passed, whether they open a relevant section or
    close one. Call the filter once per line, in file order.
    """

    def __init__(self, sections: Sequence[tuple[str, int]] = PERFORMANCE_SECTIONS):
        self.sections = tuple(sections)
        self.inside_relevant_section = False

    def __call__(self, line: str) -> bool:
        return self.accept(line)

    def accept(self, line: str) -> bool:
        """Decide whether line should be absorbed.

        Args:
            line: Next line of the file

        Returns:
            True if the line belongs to a relevant section's body
        """
        if header_position(line) < 0:
            return self.inside_relevant_section
        self.inside_relevant_section = matches_section(line, self.sections)
        return False

    def reset(self):
        self.inside_relevant_section = False
