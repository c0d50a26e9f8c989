"""Constraint Validators for Scenario Runs

Provides validation for:
- G record verification (and that an edit breaks it)
- Strictly changing timestamps in the position buffer
- The record cap
- Landing debounce
"""

from typing import Optional, Sequence

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from simlogger.phase import PhaseEvent
from simlogger.session import PositionSample
from simlogger.verify import VerifyStatus, verify_text


def tamper_first_position(text: str) -> Optional[str]:
    """Flip one altitude digit in the first B record.

    Returns:
        Edited document, or None if it has no B record
    """
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if line.startswith("B") and len(line) > 29:
            digit = line[29]
            replacement = "1" if digit != "1" else "2"
            lines[i] = line[:29] + replacement + line[30:]
            return "\n".join(lines)
    return None


class TrailerValidator:
    """A composed log verifies, and stops verifying once edited."""

    def __init__(self):
        self.violations: list[dict] = []
        self.checks_passed: int = 0

    def validate(self, text: str) -> bool:
        """Check one composed document.

        Args:
            text: Document as composed

        Returns:
            True if the original verifies and the edited copy does not
        """
        result = verify_text(text)
        if not result.ok:
            self.violations.append({
                "type": "trailer_invalid",
                "status": result.status.value,
                "expected": result.expected,
                "computed": result.computed
            })
            return False

        tampered = tamper_first_position(text)
        if tampered is not None and verify_text(tampered).status is not VerifyStatus.MISMATCH:
            self.violations.append({
                "type": "tamper_undetected",
                "digest": result.expected
            })
            return False

        self.checks_passed += 1
        return True

    def get_report(self) -> dict:
        """Get validation report."""
        return {
            "checks_passed": self.checks_passed,
            "violations": len(self.violations),
            "is_valid": len(self.violations) == 0,
            "violation_details": self.violations
        }


class BufferValidator:
    """Position buffer invariants: unique consecutive timestamps, capped length."""

    def __init__(self, max_records: int):
        self.max_records = max_records
        self.violations: list[dict] = []

    def validate(self, positions: Sequence[PositionSample]) -> bool:
        """Check a buffer snapshot.

        Args:
            positions: Positions in buffer order

        Returns:
            True if no invariant is broken
        """
        if len(positions) > self.max_records:
            self.violations.append({
                "type": "cap_exceeded",
                "max_records": self.max_records,
                "actual": len(positions)
            })

        for i in range(1, len(positions)):
            if positions[i].time_of_day == positions[i - 1].time_of_day:
                self.violations.append({
                    "type": "duplicate_timestamp",
                    "index": i,
                    "time_of_day": positions[i].time_of_day
                })
                break

        return len(self.violations) == 0

    def get_report(self) -> dict:
        """Get validation report."""
        return {
            "max_records": self.max_records,
            "violations": len(self.violations),
            "is_valid": len(self.violations) == 0,
            "violation_details": self.violations
        }


class LandingValidator:
    """Landings are signalled exactly as often as expected."""

    def __init__(self, expected_landings: int):
        self.expected_landings = expected_landings
        self.violations: list[dict] = []

    def validate(self, events: Sequence[PhaseEvent]) -> bool:
        landings = sum(1 for e in events if e is PhaseEvent.LANDING)
        if landings != self.expected_landings:
            self.violations.append({
                "type": "landing_count",
                "expected": self.expected_landings,
                "actual": landings
            })
            return False
        return True

    def get_report(self) -> dict:
        """Get validation report."""
        return {
            "expected_landings": self.expected_landings,
            "violations": len(self.violations),
            "is_valid": len(self.violations) == 0,
            "violation_details": self.violations
        }
