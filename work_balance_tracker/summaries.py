from __future__ import annotations

from .balance import calculate_daily_balance
from .balance import should_exclude_from_balance
from .models import DailyEntry
from .models import EntryStatus
from .models import weekday_index
from .models import WorkSchedule
from .timecalc import format_hours
from .timecalc import round_half_up
from .weeks import get_week_key
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict
from typing import Iterable
from typing import List
from typing import Sequence
from typing import Set

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_WEEKDAY_INDICES = range(1, 6)


@dataclass(frozen=True)
class YearlyBalance:
    balance_minutes: float
    balance_formatted: str


@dataclass(frozen=True)
class AverageWeeklyHours:
    avg_minutes: float
    avg_formatted: str


@dataclass(frozen=True)
class DayOfWeekStat:
    """Worked-minute statistics for one weekday (0=Sunday .. 6=Saturday)."""

    day: int
    name: str
    avg_minutes: float
    min_minutes: float
    max_minutes: float
    avg_hours_str: str
    count: int


def calculate_yearly_balance(
    entries: Iterable[DailyEntry],
    schedules: Sequence[WorkSchedule],
    reference: date,
) -> YearlyBalance:
    """Sum of daily balances, leaving out today's unfinished entry."""
    total = 0
    for entry in entries:
        if should_exclude_from_balance(entry, reference):
            continue
        total += calculate_daily_balance(entry, schedules).balance_minutes
    return YearlyBalance(balance_minutes=total, balance_formatted=format_hours(total))


def calculate_average_weekly_hours(
    entries: Iterable[DailyEntry],
    schedules: Sequence[WorkSchedule],
    expected_weekly_hours: float,
    reference: date,
) -> AverageWeeklyHours:
    """
    Average weekly worked minutes: the expected week plus the mean weekly balance.

    Only weeks with at least one work entry that logged time take part, so
    weeks made only of absences neither raise nor lower the average. Without
    any such week the expected week is returned unchanged.
    """
    expected_minutes = expected_weekly_hours * 60
    weekly_balances: Dict[str, float] = defaultdict(float)
    weeks_with_work: Set[str] = set()

    for entry in entries:
        if should_exclude_from_balance(entry, reference):
            continue
        week_key = get_week_key(entry.date)
        result = calculate_daily_balance(entry, schedules)
        weekly_balances[week_key] += result.balance_minutes
        if entry.is_work and result.actual_minutes > 0:
            weeks_with_work.add(week_key)

    if not weeks_with_work:
        return AverageWeeklyHours(avg_minutes=expected_minutes, avg_formatted=format_hours(expected_minutes))

    total_balance = sum(weekly_balances[key] for key in weeks_with_work)
    avg_minutes = expected_minutes + total_balance / len(weeks_with_work)
    return AverageWeeklyHours(avg_minutes=avg_minutes, avg_formatted=format_hours(round_half_up(avg_minutes)))


def calculate_day_of_week_stats(
    entries: Iterable[DailyEntry],
    schedules: Sequence[WorkSchedule],
    reference: date,
) -> List[DayOfWeekStat]:
    """Average, minimum and maximum worked minutes per weekday, Monday to Friday only."""
    samples: Dict[int, List[float]] = defaultdict(list)
    for entry in entries:
        if not entry.is_work:
            continue
        if should_exclude_from_balance(entry, reference):
            continue
        result = calculate_daily_balance(entry, schedules)
        samples[weekday_index(entry.date)].append(result.actual_minutes)

    stats: List[DayOfWeekStat] = []
    for day in _WEEKDAY_INDICES:
        minutes = samples.get(day)
        if not minutes:
            continue
        avg_minutes = sum(minutes) / len(minutes)
        stats.append(
            DayOfWeekStat(
                day=day,
                name=DAY_NAMES[day],
                avg_minutes=avg_minutes,
                min_minutes=min(minutes),
                max_minutes=max(minutes),
                avg_hours_str=format_hours(round_half_up(avg_minutes)),
                count=len(minutes),
            )
        )
    return stats


def count_sick_days(entries: Iterable[DailyEntry]) -> int:
    return sum(1 for entry in entries if entry.status == EntryStatus.SICK.value)
