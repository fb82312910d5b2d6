from __future__ import annotations

from .models import DailyEntry
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from datetime import timedelta
from typing import Dict
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence
from typing import Tuple

_MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_SATURDAY_OFFSET = 5


class WeekNumber(NamedTuple):
    year: int
    week: int


@dataclass(frozen=True)
class WeekDay:
    date: date
    entry: Optional[DailyEntry]


@dataclass(frozen=True)
class WeekGroup:
    week_key: str
    week_range: str
    days: Tuple[WeekDay, ...]


def get_week_number(target: date) -> WeekNumber:
    iso = target.isocalendar()
    return WeekNumber(year=iso.year, week=iso.week)


def get_week_key(target: date) -> str:
    year, week = get_week_number(target)
    return f"{year}-W{week}"


def parse_week_key(key: str) -> Optional[WeekNumber]:
    year_raw, separator, week_raw = key.partition("-W")
    if not separator:
        return None
    try:
        year = int(year_raw)
        week = int(week_raw)
    except ValueError:
        return None
    if not 1 <= week <= 53 or not 1 <= year <= 9998:
        return None
    return WeekNumber(year=year, week=week)


def week_monday(year: int, week: int) -> date:
    """Monday of ISO ``week``; January 4th always falls in week 1."""
    jan4 = date(year, 1, 4)
    week1_monday = jan4 - timedelta(days=jan4.isoweekday() - 1)
    return week1_monday + timedelta(weeks=week - 1)


def fill_week_days(
    week_entries: Sequence[DailyEntry],
    week_key: str,
    today: date,
) -> List[WeekDay]:
    """
    Lay out the days of one week for display, most recent first.

    Weekdays are shown when they are not in the future or when they hold an
    entry; Saturday and Sunday only when they hold an entry. The week is taken
    from ``week_key`` rather than from the entries, and a week without any
    entries yields nothing.
    """
    if not week_entries:
        return []
    parsed = parse_week_key(week_key)
    if parsed is None:
        return []

    monday = week_monday(parsed.year, parsed.week)
    by_date: Dict[date, DailyEntry] = {entry.date: entry for entry in week_entries}
    days: List[WeekDay] = []
    for offset in range(7):
        current = monday + timedelta(days=offset)
        entry = by_date.get(current)
        if offset >= _SATURDAY_OFFSET:
            if entry is not None:
                days.append(WeekDay(date=current, entry=entry))
        elif current <= today or entry is not None:
            days.append(WeekDay(date=current, entry=entry))
    days.reverse()
    return days


def format_week_range(year: int, week: int) -> str:
    monday = week_monday(year, week)
    sunday = monday + timedelta(days=6)
    return f"{_format_short_date(monday)} - {_format_short_date(sunday)}"


def group_entries_by_week(entries: Iterable[DailyEntry], today: date) -> List[WeekGroup]:
    """Timesheet layout: one group per ISO week holding entries, most recent week first."""
    buckets: Dict[WeekNumber, List[DailyEntry]] = defaultdict(list)
    for entry in entries:
        buckets[get_week_number(entry.date)].append(entry)

    groups: List[WeekGroup] = []
    for number in sorted(buckets, reverse=True):
        key = f"{number.year}-W{number.week}"
        groups.append(
            WeekGroup(
                week_key=key,
                week_range=format_week_range(number.year, number.week),
                days=tuple(fill_week_days(buckets[number], key, today)),
            )
        )
    return groups


def _format_short_date(target: date) -> str:
    return f"{_MONTH_ABBREVIATIONS[target.month - 1]} {target.day}"
