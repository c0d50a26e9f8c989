#!/usr/bin/env python3
"""Watchdog for sim_logger Log Folders

Re-verifies every log in a folder so a quietly edited file shows up.

Usage:
    python log_watchdog.py --check logs/             # One pass
    python log_watchdog.py --daemon logs/            # Repeat every --interval seconds
"""

import argparse
import json
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from config.constants import LOG_EXTENSION, WATCHDOG_INTERVAL_S
from simlogger.core import emit_receipt
from simlogger.verify import verify_file


def check_directory(directory) -> dict:
    """Verify every log in a directory once.

    Args:
        directory: Folder holding logs

    Returns:
        Status dict with one entry per log
    """
    directory = Path(directory)
    status = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "directory": str(directory),
        "logs": {},
        "healthy": True
    }

    if not directory.is_dir():
        status["healthy"] = False
        status["error"] = f"not a directory: {directory}"
        return status

    for path in sorted(directory.iterdir()):
        if path.suffix.lower() != LOG_EXTENSION:
            continue
        result = verify_file(path)
        status["logs"][path.name] = {
            "status": result.status.value,
            "expected": result.expected,
            "computed": result.computed
        }
        if not result.ok:
            status["healthy"] = False

    return status


def run_daemon(directory, interval: int = WATCHDOG_INTERVAL_S):
    """Run watchdog as daemon.

    Args:
        directory: Folder holding logs
        interval: Check interval in seconds
    """
    print(f"Starting watchdog on {directory} (interval: {interval}s)")
    print("Press Ctrl+C to stop\n")

    check_count = 0

    try:
        while True:
            check_count += 1
            status = check_directory(directory)

            ts = status["timestamp"]
            healthy = "✓ ALL OK" if status["healthy"] else "✗ PROBLEMS"
            print(f"[{ts}] Check #{check_count}: {healthy} ({len(status['logs'])} logs)")

            emit_receipt("watchdog", {
                "check_number": check_count,
                "healthy": status["healthy"],
                "logs_ok": sum(1 for c in status["logs"].values() if c["status"] == "ok"),
                "logs_total": len(status["logs"])
            }, silent=True)

            if not status["healthy"]:
                if status.get("error"):
                    print(f"  ! {status['error']}")
                for name, check in status["logs"].items():
                    if check["status"] != "ok":
                        print(f"  ! {name}: {check['status']}")

            time.sleep(interval)

    except KeyboardInterrupt:
        print("\nWatchdog stopped.")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="sim_logger Watchdog"
    )
    parser.add_argument(
        "--check",
        metavar="DIR",
        help="Verify every log in DIR once"
    )
    parser.add_argument(
        "--daemon",
        metavar="DIR",
        help="Keep verifying DIR"
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=WATCHDOG_INTERVAL_S,
        help="Check interval in seconds (daemon mode)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON"
    )

    args = parser.parse_args(argv)

    if args.daemon:
        run_daemon(args.daemon, args.interval)
    elif args.check:
        status = check_directory(args.check)

        if args.json:
            print(json.dumps(status, indent=2))
        else:
            print("\n" + "=" * 50)
            print("  WATCHDOG LOG CHECK")
            print("=" * 50)
            print(f"\n  Status: {'✓ ALL OK' if status['healthy'] else '✗ PROBLEMS'}")
            print(f"  Time: {status['timestamp']}\n")

            if status.get("error"):
                print(f"  ✗ {status['error']}")
            for name, check in status["logs"].items():
                icon = "✓" if check["status"] == "ok" else "✗"
                print(f"  {icon} {name}: {check['status']}")

            print("\n" + "=" * 50)

        sys.exit(0 if status["healthy"] else 1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
