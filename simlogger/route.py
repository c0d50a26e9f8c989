"""Route Plan Parser

Turns a simulator flight plan into the task (C) records of a log: a header
record with the declaration time, turnpoint count and title, then one
record per point: takeoff, start, turnpoints, finish, landing.

Plans are scanned line by line for the handful of tags we need. Every
character outside a small safe set is blanked before a line is looked at,
so nothing a plan author typed can smuggle control characters or
non-ASCII text into a log.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from config.constants import (
    ROUTE_MARKER,
    ROUTE_COORD_WIDTH,
    ROUTE_NAME_OFFSET,
    ROUTE_DEFAULT_TITLE,
    ROUTE_TASK_FIELDS,
    ROUTE_MIN_WAYPOINTS,
    ROUTE_BLANK_COORD,
    ROUTE_SAFE_CHARS,
)
from .core import FileError, emit_receipt

_SAFE = frozenset(ROUTE_SAFE_CHARS)

# Hemisphere, degrees, minutes, seconds for latitude then longitude
_LLA_PATTERN = re.compile(
    r"([NS])\s*(\d+)\s+(\d+)\s+(\d+(?:\.\d*)?)\s*,\s*"
    r"([EW])\s*(\d+)\s+(\d+)\s+(\d+(?:\.\d*)?)"
)

TAG_TITLE = "<Title>"
TAG_DEPARTURE_NAME = "<DepartureName>"
TAG_DESTINATION_NAME = "<DestinationName>"
TAG_DEPARTURE_LLA = "<DepartureLLA>"
TAG_DESTINATION_LLA = "<DestinationLLA>"
TAG_WAYPOINT = "<ATCWaypoint "
TAG_WORLD_POSITION = "<WorldPosition>"


class WaypointRole(Enum):
    DEPARTURE = "departure"
    START = "start"
    TURNPOINT = "turnpoint"
    FINISH = "finish"
    DESTINATION = "destination"


@dataclass
class WaypointRecord:
    """One route point, already in log layout."""
    role: WaypointRole
    coord_text: str = ROUTE_BLANK_COORD
    name: str = ""

    def to_line(self) -> str:
        coord = self.coord_text[:ROUTE_COORD_WIDTH].ljust(ROUTE_NAME_OFFSET)
        return f"{coord}{self.name}\n"


@dataclass
class RoutePlan:
    """Everything the log needs from a flight plan."""
    declared_at: datetime
    title: str = ""
    departure: WaypointRecord = field(default_factory=lambda: WaypointRecord(WaypointRole.DEPARTURE))
    destination: WaypointRecord = field(default_factory=lambda: WaypointRecord(WaypointRole.DESTINATION))
    waypoints: list[WaypointRecord] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def turnpoint_count(self) -> int:
        return max(0, len(self.waypoints) - 2)

    @property
    def points(self) -> list[WaypointRecord]:
        """Departure, waypoints, destination in log order."""
        return [self.departure, *self.waypoints, self.destination]

    def header_line(self) -> str:
        title = self.title or ROUTE_DEFAULT_TITLE
        return (f"{ROUTE_MARKER}{self.declared_at:%d%m%y%H%M%S}{ROUTE_TASK_FIELDS}"
                f"{self.turnpoint_count:02d}{title}\n")

    def to_lines(self) -> list[str]:
        """C records, or nothing when the plan has too few waypoints."""
        if len(self.waypoints) < ROUTE_MIN_WAYPOINTS:
            return []
        return [self.header_line()] + [point.to_line() for point in self.points]


def sanitize(text: str) -> str:
    """Replace every character outside the safe set with a blank."""
    return "".join(ch if ch in _SAFE else " " for ch in text)


def format_thousandths(seconds: float) -> str:
    """Seconds of arc as thousandths of a minute, three digits."""
    text = "%03.0f" % (seconds / 60 * 1000)
    return text if len(text) <= 3 else "999"


def format_coordinate(lat_hemisphere: str, lat_degrees: int, lat_minutes: int, lat_seconds: float,
                      lon_hemisphere: str, lon_degrees: int, lon_minutes: int, lon_seconds: float) -> str:
    """DMS pair as the fixed-width "CDDMMmmmNDDDMMmmmE" text."""
    return (f"{ROUTE_MARKER}{lat_degrees:02d}{lat_minutes:02d}{format_thousandths(lat_seconds)}"
            f"{lat_hemisphere}{lon_degrees:03d}{lon_minutes:02d}{format_thousandths(lon_seconds)}"
            f"{lon_hemisphere}")


def parse_coordinate(value: str) -> Optional[str]:
    """Parse a sanitized "N51 54 30.00 ,W1 21 47.00 ,..." value.

    Returns:
        Fixed-width coordinate text, or None if the value does not parse
    """
    match = _LLA_PATTERN.search(value)
    if match is None:
        return None
    lat_h, lat_d, lat_m, lat_s, lon_h, lon_d, lon_m, lon_s = match.groups()
    return format_coordinate(lat_h, int(lat_d), int(lat_m), float(lat_s),
                             lon_h, int(lon_d), int(lon_m), float(lon_s))


def _tag_value(line: str, tag: str) -> Optional[str]:
    """Text between tag and the next '<' on the same line."""
    start = line.find(tag)
    if start < 0:
        return None
    end = line.find("<", start + 1)
    if end < 0:
        return None
    return line[start + len(tag):end]


def _waypoint_name(line: str, start: int) -> str:
    end = line.find(">", start)
    if end < 0:
        return ""
    attributes = line[start + len(TAG_WAYPOINT):end].strip()
    if attributes.startswith("id"):
        attributes = attributes[2:]
    return attributes.strip()


def parse_route_plan(lines: Iterable[str], now: Optional[datetime] = None) -> RoutePlan:
    """Extract a RoutePlan from plan text.

    Missing fields never abort parsing: they keep their blank defaults and
    are listed in RoutePlan.missing.

    Args:
        lines: Raw plan lines
        now: Declaration time for the header record (defaults to now)

    Returns:
        RoutePlan
    """
    plan = RoutePlan(declared_at=now or datetime.now())
    found = set()

    for raw in lines:
        line = sanitize(raw.rstrip("\r\n"))

        if TAG_TITLE in line:
            value = _tag_value(line, TAG_TITLE)
            if value is not None:
                plan.title = value
                found.add("title")
            continue

        if TAG_DEPARTURE_NAME in line:
            value = _tag_value(line, TAG_DEPARTURE_NAME)
            if value is not None:
                plan.departure.name = value
                found.add("departure_name")
            continue

        if TAG_DESTINATION_NAME in line:
            value = _tag_value(line, TAG_DESTINATION_NAME)
            if value is not None:
                plan.destination.name = value
                found.add("destination_name")
            continue

        if TAG_DEPARTURE_LLA in line:
            value = _tag_value(line, TAG_DEPARTURE_LLA)
            coord = parse_coordinate(value) if value is not None else None
            if coord:
                plan.departure.coord_text = coord
                found.add("departure_position")
            continue

        if TAG_DESTINATION_LLA in line:
            value = _tag_value(line, TAG_DESTINATION_LLA)
            coord = parse_coordinate(value) if value is not None else None
            if coord:
                plan.destination.coord_text = coord
                found.add("destination_position")
            continue

        start = line.find(TAG_WAYPOINT)
        if start >= 0:
            plan.waypoints.append(WaypointRecord(WaypointRole.TURNPOINT, name=_waypoint_name(line, start)))
            continue

        if TAG_WORLD_POSITION in line and plan.waypoints:
            value = _tag_value(line, TAG_WORLD_POSITION)
            coord = parse_coordinate(value) if value is not None else None
            if coord:
                plan.waypoints[-1].coord_text = coord
            continue

    if plan.waypoints:
        plan.waypoints[0].role = WaypointRole.START
    if len(plan.waypoints) > 1:
        plan.waypoints[-1].role = WaypointRole.FINISH

    plan.missing = [name for name in ("title", "departure_name", "destination_name",
                                      "departure_position", "destination_position")
                    if name not in found]
    return plan


def decode_plan(data: bytes) -> str:
    """Plans are UTF-16 with a BOM when the simulator saved them, UTF-8 otherwise."""
    if data.startswith((b"\xff\xfe", b"\xfe\xff")):
        return data.decode("utf-16", errors="replace")
    return data.decode("utf-8-sig", errors="replace")


def load_route_plan(path, now: Optional[datetime] = None) -> RoutePlan:
    """Read and parse a plan file.

    Raises:
        FileError: If the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise FileError(path, "read", e.strerror or str(e)) from e

    plan = parse_route_plan(decode_plan(data).splitlines(), now)

    emit_receipt("route_parse", {
        "path": str(path),
        "title": plan.title,
        "waypoints": len(plan.waypoints),
        "turnpoints": plan.turnpoint_count,
        "missing": plan.missing
    }, silent=True)
    if plan.missing:
        emit_receipt("parse_incomplete", {
            "path": str(path),
            "missing": plan.missing
        }, silent=True)

    return plan
