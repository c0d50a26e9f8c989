#!/usr/bin/env python3
"""Tamper Detection Demo

Builds a log from a synthetic flight, checks it, edits one altitude and
checks it again.

Usage:
    python demo/tamper_demo.py
    python demo/tamper_demo.py --verify-detection
    python demo/tamper_demo.py --record 25 --altitude 3000
"""

import argparse
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sim.scenarios import BASELINE
from sim.sim import SIM_CLOCK, SIM_FLIGHT_DATE, generate_telemetry
from simlogger.core import dual_hash
from simlogger.logger import FlightLogger
from simlogger.replay import replay
from simlogger.verify import describe, format_verification, verify_text


def print_header():
    """Print demo header."""
    print("\n" + "=" * 60)
    print("  sim_logger - TAMPER DETECTION DEMO")
    print("=" * 60 + "\n")


def print_phase(phase: int, title: str):
    """Print phase header."""
    print(f"\n{'─' * 60}")
    print(f"  PHASE {phase}: {title}")
    print(f"{'─' * 60}\n")


def edit_altitude(text: str, record: int, altitude: int) -> tuple[str, str, str]:
    """Replace both altitudes of the record-th B record.

    Returns:
        (edited document, original line, edited line)
    """
    lines = text.split("\n")
    seen = 0
    for i, line in enumerate(lines):
        if not line.startswith("B"):
            continue
        if seen == record:
            edited = line[:25] + "%05d%05d" % (altitude, altitude) + line[35:]
            lines[i] = edited
            return "\n".join(lines), line, edited
        seen += 1
    raise IndexError(f"log has only {seen} B records")


def run_demo(record: int = 25, altitude: int = 3000, verify_only: bool = False):
    """Run the tamper detection demo.

    Args:
        record: Which B record to edit
        altitude: Altitude to write into it
        verify_only: Only verify, don't show tampering
    """
    print_header()

    # Phase 1: Fly
    print_phase(1, "RECORDING A FLIGHT")

    samples = generate_telemetry(BASELINE)
    logger = FlightLogger()
    logger.on_startup_data(SIM_FLIGHT_DATE)
    logger.on_aircraft_data("DEMO1", "DG808S", "DG Flugzeugbau DG-808S")
    events = replay(logger, samples)
    composed = logger.finalize(now=SIM_CLOCK)

    print(f"  ✓ {len(samples)} telemetry ticks")
    print(f"  ✓ {composed.records} positions recorded")
    print(f"  ✓ {len(events)} takeoff/landing events")
    print(f"  ✓ G record: {composed.digest}")

    # Phase 2: Verify original
    print_phase(2, "VERIFYING ORIGINAL LOG")

    result = verify_text(composed.text)
    print(format_verification(result))
    if not result.ok:
        return False

    if verify_only:
        print("\n  Demo complete (verify-only mode).")
        return True

    # Phase 3: Edit
    print_phase(3, "EDITING ONE POSITION")

    tampered, before, after = edit_altitude(composed.text, record, altitude)
    print(f"  Target: B record #{record}")
    print(f"    before: {before}")
    print(f"    after:  {after}")

    time.sleep(0.5)

    # Phase 4: Detection
    print_phase(4, "DETECTION RESULT")

    start = time.perf_counter()
    tampered_result = verify_text(tampered)
    latency_ms = (time.perf_counter() - start) * 1000

    print(format_verification(tampered_result))
    print(f"  Detection time: {latency_ms:.2f}ms")

    print("\n  Ledger hashes:")
    print(f"    original: {dual_hash(composed.text)[:32]}...")
    print(f"    edited:   {dual_hash(tampered)[:32]}...")

    # Summary
    print("\n" + "=" * 60)
    print("  DEMO COMPLETE")
    print("=" * 60)
    print(f"\n  {describe(tampered_result)}")
    print()

    return not tampered_result.ok


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="sim_logger Tamper Detection Demo"
    )
    parser.add_argument(
        "--record", "-r",
        type=int,
        default=25,
        help="B record to edit (default: 25)"
    )
    parser.add_argument(
        "--altitude", "-a",
        type=int,
        default=3000,
        help="Altitude to write in meters (default: 3000)"
    )
    parser.add_argument(
        "--verify-detection",
        action="store_true",
        help="Only verify the log without editing it"
    )

    args = parser.parse_args()

    success = run_demo(
        record=args.record,
        altitude=args.altitude,
        verify_only=args.verify_detection
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
