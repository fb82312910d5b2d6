from __future__ import annotations

from .models import weekday_index
from .models import WorkSchedule
from datetime import date
from typing import Optional
from typing import Sequence

DEFAULT_WEEKLY_HOURS = 40.0


def active_schedule(target: date, schedules: Sequence[WorkSchedule]) -> Optional[WorkSchedule]:
    """Return the schedule with the latest ``effective_date`` on or before ``target``."""
    ordered = sorted(schedules, key=lambda schedule: schedule.effective_date, reverse=True)
    for schedule in ordered:
        if schedule.effective_date <= target:
            return schedule
    return None


def expected_daily_hours(target: date, schedules: Sequence[WorkSchedule]) -> float:
    """
    Hours expected on ``target`` according to the schedule history.

    Days before the first schedule and days outside the schedule's work days
    expect nothing. Absences are not considered here; the balance calculator
    decides that from the entry status.
    """
    schedule = active_schedule(target, schedules)
    if schedule is None:
        return 0.0
    if weekday_index(target) not in schedule.work_days:
        return 0.0
    days_per_week = len(schedule.work_days)
    if days_per_week == 0:
        return 0.0
    return schedule.weekly_hours / days_per_week


def expected_weekly_hours(
    target: date,
    schedules: Sequence[WorkSchedule],
    default: float = DEFAULT_WEEKLY_HOURS,
) -> float:
    schedule = active_schedule(target, schedules)
    if schedule is None and schedules:
        schedule = min(schedules, key=lambda item: item.effective_date)
    if schedule is None:
        return default
    return schedule.weekly_hours
