from __future__ import annotations

from .milestones import collect_relevant_milestones
from .milestones import get_next_milestone_display
from .milestones import MilestoneDisplay
from .models import CustomAbsenceType
from .models import DailyEntry
from .models import UserDocument
from .models import UserSettings
from .pto import ALL_YEARS_END
from .pto import ALL_YEARS_START
from .pto import calculate_absence_usage
from .pto import reassign_entries_status
from .pto import remove_absence_type
from .schedule import expected_weekly_hours
from .storage import entry_id
from .storage import EntryStore
from .summaries import AverageWeeklyHours
from .summaries import calculate_average_weekly_hours
from .summaries import calculate_day_of_week_stats
from .summaries import calculate_yearly_balance
from .summaries import count_sick_days
from .summaries import DayOfWeekStat
from .summaries import YearlyBalance
from .vacation import calculate_vacation_stats
from .vacation import vacation_reference_date
from .vacation import VacationStats
from .weeks import group_entries_by_week
from .weeks import WeekGroup
from copy import deepcopy
from dataclasses import dataclass
from dataclasses import replace
from datetime import date
from datetime import datetime
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple

import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearOverview:
    year: int
    entries: Tuple[DailyEntry, ...]
    yearly_balance: YearlyBalance
    average_weekly: AverageWeeklyHours
    expected_weekly_hours: float
    day_of_week_stats: Tuple[DayOfWeekStat, ...]
    sick_days: int
    vacation: VacationStats
    weeks: Tuple[WeekGroup, ...]
    next_milestone: Optional[MilestoneDisplay]


class TrackerState:
    """Reads and writes one user's data through an injected store and runs the calculations on it."""

    def __init__(
        self,
        store: EntryStore,
        uid: str,
        default_settings: Optional[UserSettings] = None,
    ) -> None:
        self.store = store
        self.uid = uid
        self.default_settings = default_settings or UserSettings()

    # ------------------------------------------------------------------
    # Queries
    def user(self) -> Optional[UserDocument]:
        return self.store.get_user(self.uid)

    def settings(self) -> UserSettings:
        user = self.user()
        if user is None:
            return deepcopy(self.default_settings)
        return user.settings

    def entries_for_year(self, year: int) -> List[DailyEntry]:
        return self.store.get_entries(self.uid, date(year, 1, 1), date(year, 12, 31))

    def year_overview(self, year: int, now: datetime) -> YearOverview:
        today = now.date()
        settings = self.settings()
        entries = self.entries_for_year(year)
        schedules = settings.schedules
        reference = vacation_reference_date(year, today)
        weekly_hours = expected_weekly_hours(reference, schedules)
        milestones = collect_relevant_milestones(settings.yearly_milestones, year, today)
        return YearOverview(
            year=year,
            entries=tuple(entries),
            yearly_balance=calculate_yearly_balance(entries, schedules, now),
            average_weekly=calculate_average_weekly_hours(entries, schedules, weekly_hours, now),
            expected_weekly_hours=weekly_hours,
            day_of_week_stats=tuple(calculate_day_of_week_stats(entries, schedules, now)),
            sick_days=count_sick_days(entries),
            vacation=calculate_vacation_stats(
                entries,
                settings.vacation,
                reference,
            ),
            weeks=tuple(group_entries_by_week(entries, today)),
            next_milestone=get_next_milestone_display(milestones, today),
        )

    # ------------------------------------------------------------------
    # Mutations
    def save_entry(self, entry: DailyEntry) -> None:
        self.store.save_entry(self.uid, entry)
        logger.info("Saved %s entry for %s", entry.status, entry.date.isoformat())

    def delete_entry(self, day: date) -> None:
        self.store.delete_entry(self.uid, day)
        logger.info("Deleted entry for %s", day.isoformat())

    def save_settings(self, settings: UserSettings, now: datetime, email: str = "") -> UserDocument:
        latest = self.user()
        user = UserDocument(
            uid=self.uid,
            email=latest.email if latest and latest.email else email,
            settings=settings,
            created_at=latest.created_at if latest and latest.created_at else now.isoformat(),
        )
        self.store.save_user(user)
        logger.info("Saved settings for %s", self.uid)
        return user

    def save_custom_absence_types(
        self,
        custom_types: Sequence[CustomAbsenceType],
        now: datetime,
    ) -> UserDocument:
        """Replace the custom absence types on top of the latest stored settings."""
        settings = replace(self.settings(), custom_absence_types=list(custom_types))
        return self.save_settings(settings, now)

    def delete_custom_absence_type(
        self,
        type_id: str,
        now: datetime,
        reassign_to: Optional[str] = None,
    ) -> int:
        """
        Remove a custom absence type together with its entries.

        Entries logged with the type are moved to ``reassign_to`` when given,
        otherwise deleted. Returns the number of affected entries.
        """
        all_entries = self.store.get_entries(self.uid, ALL_YEARS_START, ALL_YEARS_END)
        usage = calculate_absence_usage(all_entries, type_id)
        if usage.affected_entries:
            if reassign_to:
                self.store.batch_save_entries(self.uid, reassign_entries_status(usage.affected_entries, reassign_to))
            else:
                ids = [entry_id(self.uid, entry.date) for entry in usage.affected_entries]
                self.store.batch_delete_entries(self.uid, ids)
        settings = self.settings()
        self.save_custom_absence_types(remove_absence_type(settings.custom_absence_types, type_id), now)
        logger.info("Removed absence type %s (%d entries affected)", type_id, len(usage.affected_entries))
        return len(usage.affected_entries)
