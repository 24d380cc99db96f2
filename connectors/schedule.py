"""
Daily sync schedule helpers.

Connectors run once a day at a user-picked hour and minute in a user-picked
timezone. The schedule is stored as a 5-field cron expression of the fixed
shape ``"<minute> <hour> * * *"``; interpreting it is the job runner's
business.
"""

from __future__ import annotations

from typing import List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

HOUR_ITEMS: List[Tuple[int, str]] = [(h, f"{h:02d}") for h in range(24)]
MINUTE_ITEMS: List[Tuple[int, str]] = [(m, f"{m:02d}") for m in range(60)]

TIMEZONE_ITEMS: List[str] = [
    "UTC",
    "Europe/London",
    "Europe/Berlin",
    "Europe/Paris",
    "Europe/Madrid",
    "Europe/Istanbul",
    "Africa/Cairo",
    "Africa/Johannesburg",
    "Asia/Dubai",
    "Asia/Kolkata",
    "Asia/Singapore",
    "Asia/Shanghai",
    "Asia/Tokyo",
    "Australia/Sydney",
    "Pacific/Auckland",
    "America/Sao_Paulo",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
]


def to_cron(hour: int, minute: int) -> str:
    """Return the daily cron expression firing at ``hour:minute``."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute out of range: {minute}")
    return f"{minute} {hour} * * *"


def parse_cron(expression: str) -> Tuple[int, int]:
    """
    Inverse of :func:`to_cron`.

    Returns ``(hour, minute)``. Raises ``ValueError`` for anything that is
    not a daily expression.
    """
    fields = expression.split()
    if len(fields) != 5 or fields[2:] != ["*", "*", "*"]:
        raise ValueError(f"not a daily cron expression: {expression!r}")
    try:
        minute, hour = int(fields[0]), int(fields[1])
    except ValueError:
        raise ValueError(f"not a daily cron expression: {expression!r}") from None
    to_cron(hour, minute)
    return hour, minute


def is_valid_timezone(name: str) -> bool:
    if not name:
        return False
    if name == "UTC":
        return True
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def describe_schedule(cron_job: str, timezone: str) -> str:
    """Human-readable form used by the detail page: ``"<timezone>, <cron>"``."""
    return f"{timezone}, {cron_job}"
