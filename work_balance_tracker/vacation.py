from __future__ import annotations

from .models import DailyEntry
from .models import EntryStatus
from .models import VacationSettings
from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from typing import Iterable
from typing import NamedTuple


@dataclass(frozen=True)
class VacationStats:
    used_days: int
    planned_days: int
    remaining_days: float
    allowance_days: float


class VacationYear(NamedTuple):
    start_year: int
    start: date
    end: date


def vacation_year_window(settings: VacationSettings, today: date) -> VacationYear:
    """
    The vacation year containing ``today`` as a half-open ``[start, end)`` window.

    When ``today`` falls before this calendar year's start day, the vacation
    year began in the previous calendar year.
    """
    start_year = today.year
    if today < _year_start(today.year, settings):
        start_year -= 1
    return VacationYear(
        start_year=start_year,
        start=_year_start(start_year, settings),
        end=_year_start(start_year + 1, settings),
    )


def calculate_vacation_stats(
    entries: Iterable[DailyEntry],
    settings: VacationSettings,
    today: date,
) -> VacationStats:
    """Used, planned and remaining vacation days for the vacation year containing ``today``."""
    window = vacation_year_window(settings, today)
    allowance = settings.yearly_allowances.get(str(window.start_year), settings.allowance_days)

    used_days = 0
    planned_days = 0
    for entry in entries:
        if entry.status != EntryStatus.VACATION.value:
            continue
        if not window.start <= entry.date < window.end:
            continue
        if entry.date < today:
            used_days += 1
        else:
            planned_days += 1

    return VacationStats(
        used_days=used_days,
        planned_days=planned_days,
        remaining_days=allowance - used_days - planned_days,
        allowance_days=allowance,
    )


def vacation_reference_date(selected_year: int, today: date) -> date:
    """Past years are evaluated at their last day, future years at their first."""
    if selected_year < today.year:
        return date(selected_year, 12, 31)
    if selected_year > today.year:
        return date(selected_year, 1, 1)
    return today


def _year_start(year: int, settings: VacationSettings) -> date:
    month = min(max(settings.year_start_month, 1), 12)
    _, days_in_month = monthrange(year, month)
    day = min(max(settings.year_start_day, 1), days_in_month)
    return date(year, month, day)
