from __future__ import annotations

from .models import TimeFormat
from typing import Optional

import math
import re

_TWELVE_HOUR_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)
_TWENTY_FOUR_HOUR_PATTERN = re.compile(r"^\d{1,2}:\d{2}$")


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def time_to_minutes(time: Optional[str]) -> int:
    """Converts ``"HH:MM"`` to minutes from midnight. Returns 0 if invalid."""
    if not time or not isinstance(time, str):
        return 0
    parts = time.split(":")
    if len(parts) < 2:
        return 0
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return 0
    return hours * 60 + minutes


def minutes_to_time(minutes: float) -> str:
    minutes = max(minutes, 0)
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours:02d}:{mins:02d}"


def calculate_duration(start_time: str, end_time: str) -> int:
    """Minutes between two ``"HH:MM"`` times. Negative when ``end_time`` is earlier."""
    return time_to_minutes(end_time) - time_to_minutes(start_time)


def format_hours(minutes: float) -> str:
    """Formats minutes as hours, e.g. 90 -> ``"1:30"`` and -45 -> ``"-0:45"``."""
    sign = "-" if minutes < 0 else ""
    abs_minutes = abs(minutes)
    hours = int(abs_minutes // 60)
    mins = int(abs_minutes % 60)
    return f"{sign}{hours}:{mins:02d}"


def format_time_display(time: Optional[str], time_format: TimeFormat = TimeFormat.H24) -> str:
    if not time:
        return "--:--"
    if time_format == TimeFormat.H24:
        return time

    hours_raw, _, minutes = time.partition(":")
    try:
        hours = int(hours_raw)
    except ValueError:
        return "--:--"
    if hours < 0 or hours > 23:
        return "--:--"

    period = "PM" if hours >= 12 else "AM"
    if hours == 0:
        hours_12 = 12
    elif hours > 12:
        hours_12 = hours - 12
    else:
        hours_12 = hours
    return f"{hours_12}:{minutes} {period}"


def parse_time_input(text: str) -> str:
    """Normalizes 12h or 24h user input to 24h ``"HH:MM"``; unknown input is returned as-is."""
    if not text or not text.strip():
        return ""
    if _TWENTY_FOUR_HOUR_PATTERN.match(text):
        return text

    match = _TWELVE_HOUR_PATTERN.match(text.strip())
    if not match:
        return text
    hours = int(match.group(1))
    minutes = match.group(2)
    period = match.group(3).upper()
    if period == "PM" and hours != 12:
        hours += 12
    elif period == "AM" and hours == 12:
        hours = 0
    return f"{hours:02d}:{minutes}"
