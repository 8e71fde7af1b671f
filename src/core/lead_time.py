"""Lead time conversions — pure business logic.

A lead time is stored on person notes as {value, unit}. Reminders carry it
as a negative ISO 8601 duration ("-P1D", "-PT15M"), and the timing logic
needs plain milliseconds. This module converts between the three.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re

from src.data.models import LeadTime

_MS_PER_UNIT: dict[str, int] = {
    "minutes": 60_000,
    "hours": 3_600_000,
    "days": 86_400_000,
    "weeks": 604_800_000,
}

_DESIGNATOR: dict[str, str] = {
    "minutes": "M",
    "hours": "H",
    "days": "D",
    "weeks": "W",
}

_SUB_DAY_UNITS = ("minutes", "hours")

_DURATION_RE = re.compile(
    r"^(?P<sign>[-+]?)P"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def to_milliseconds(lead_time: LeadTime) -> int:
    """Convert a lead time to milliseconds, e.g. 15 minutes -> 900000."""
    return lead_time.value * _MS_PER_UNIT[lead_time.unit]


def to_duration(lead_time: LeadTime) -> str:
    """Convert a lead time to a negative ISO 8601 duration.

    Examples: 1 days -> "-P1D", 15 minutes -> "-PT15M",
              2 hours -> "-PT2H", 1 weeks -> "-P1W"
    """
    time_marker = "T" if lead_time.unit in _SUB_DAY_UNITS else ""
    return f"-P{time_marker}{lead_time.value}{_DESIGNATOR[lead_time.unit]}"


def duration_to_milliseconds(duration: str) -> int | None:
    """Parse a signed ISO 8601 duration into signed milliseconds.

    Returns None for anything that is not a W/D/H/M/S duration.
    """
    match = _DURATION_RE.match(duration.strip()) if isinstance(duration, str) else None
    if match is None:
        return None

    parts = {k: int(v) for k, v in match.groupdict().items() if k != "sign" and v}
    if not parts:
        return None

    total = (
        parts.get("weeks", 0) * _MS_PER_UNIT["weeks"]
        + parts.get("days", 0) * _MS_PER_UNIT["days"]
        + parts.get("hours", 0) * _MS_PER_UNIT["hours"]
        + parts.get("minutes", 0) * _MS_PER_UNIT["minutes"]
        + parts.get("seconds", 0) * 1000
    )
    return -total if match.group("sign") == "-" else total


def is_sub_day(duration: str) -> bool:
    """True when a duration has only time (T) components, e.g. "-PT2H"."""
    match = _DURATION_RE.match(duration.strip()) if isinstance(duration, str) else None
    if match is None:
        return False
    return not match.group("weeks") and not match.group("days") and "T" in duration
