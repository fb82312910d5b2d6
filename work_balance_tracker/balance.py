from __future__ import annotations

from .models import DailyEntry
from .models import WorkSchedule
from .schedule import expected_daily_hours
from .timecalc import calculate_duration
from .timecalc import time_to_minutes
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from typing import Sequence


@dataclass(frozen=True)
class DailyBalance:
    """Computed minutes for a single logged day."""

    actual_minutes: float
    expected_minutes: float
    balance_minutes: float


def calculate_daily_balance(entry: DailyEntry, schedules: Sequence[WorkSchedule]) -> DailyBalance:
    """
    Compute actual, expected and balance minutes for one entry.

    Only ``work`` entries count their start/end times and carry an expectation
    from the schedule. Every other status is a full absence: times are ignored
    and nothing is expected, but extra hours still count as worked.
    """
    extra_minutes = (entry.extra_hours or 0) * 60
    if entry.is_work:
        worked = 0
        if entry.start_time and entry.end_time:
            worked = calculate_duration(entry.start_time, entry.end_time) - entry.lunch_minutes
        actual = worked + extra_minutes
        expected = expected_daily_hours(entry.date, schedules) * 60
    else:
        actual = extra_minutes
        expected = 0
    return DailyBalance(
        actual_minutes=actual,
        expected_minutes=expected,
        balance_minutes=actual - expected,
    )


def is_incomplete_entry(entry: DailyEntry) -> bool:
    """A work entry that has been started but not finished yet."""
    return entry.is_work and bool(entry.start_time) and not entry.end_time


def is_today(target: date, reference: date) -> bool:
    if isinstance(reference, datetime):
        reference = reference.date()
    return (target.year, target.month, target.day) == (reference.year, reference.month, reference.day)


def should_exclude_from_balance(entry: DailyEntry, reference: date) -> bool:
    """Today's unfinished entry is left out of aggregated balances."""
    return is_today(entry.date, reference) and is_incomplete_entry(entry)


def calculate_in_progress_minutes(entry: DailyEntry, now: datetime) -> float:
    """Minutes worked so far on an unfinished entry, measured up to ``now``'s wall-clock time."""
    if not is_incomplete_entry(entry):
        return 0
    now_minutes = now.hour * 60 + now.minute
    worked = now_minutes - time_to_minutes(entry.start_time) - entry.lunch_minutes
    worked += (entry.extra_hours or 0) * 60
    return max(worked, 0)
