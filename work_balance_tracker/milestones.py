from __future__ import annotations

from .models import Milestone
from .models import MilestoneType
from .timecalc import round_half_up
from dataclasses import dataclass
from dataclasses import replace
from datetime import date
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Sequence

import uuid


@dataclass(frozen=True)
class MilestoneProgress:
    percentage: int
    elapsed_days: int
    total_days: int


@dataclass(frozen=True)
class MilestoneDisplay:
    milestone: Milestone
    weeks_remaining: int
    text: str
    progress: Optional[MilestoneProgress] = None


def calculate_weeks_until(today: date, target: date) -> int:
    """
    Weeks from ``today`` until ``target``.

    Any partial week ahead counts as a whole week, so only the target day
    itself yields 0. Past targets round down and give negative values.
    """
    diff_days = (target - today).days
    if diff_days == 0:
        return 0
    if diff_days > 0:
        return -(-diff_days // 7)
    return diff_days // 7


def format_milestone_text(milestone: Milestone, weeks_remaining: int) -> str:
    week_label = "week" if weeks_remaining == 1 else "weeks"
    if milestone.type == MilestoneType.PERIOD:
        if weeks_remaining == 0:
            return f"Final week of {milestone.name}"
        return f"{weeks_remaining} {week_label} left in {milestone.name}"
    if weeks_remaining == 0:
        return f"{milestone.name} is this week"
    return f"{weeks_remaining} {week_label} until {milestone.name}"


def is_milestone_active(milestone: Milestone, today: date) -> bool:
    if milestone.start_date is None:
        return False
    if milestone.start_date > milestone.date:
        return False
    return milestone.start_date <= today <= milestone.date


def calculate_milestone_progress(milestone: Milestone, today: date) -> Optional[MilestoneProgress]:
    """Share of the milestone's days elapsed, counting both the first day and today."""
    if not is_milestone_active(milestone, today):
        return None
    total_days = (milestone.date - milestone.start_date).days + 1
    elapsed_days = (today - milestone.start_date).days + 1
    percentage = min(100, max(0, round_half_up(elapsed_days / total_days * 100)))
    return MilestoneProgress(percentage=percentage, elapsed_days=elapsed_days, total_days=total_days)


def sort_milestones_by_date(milestones: Iterable[Milestone]) -> List[Milestone]:
    return sorted(milestones, key=lambda milestone: milestone.date)


def find_next_milestone(milestones: Sequence[Milestone], today: date) -> Optional[Milestone]:
    upcoming = [milestone for milestone in milestones if milestone.date >= today]
    if not upcoming:
        return None
    return sort_milestones_by_date(upcoming)[0]


def get_next_milestone_display(milestones: Sequence[Milestone], today: date) -> Optional[MilestoneDisplay]:
    """
    Pick the milestone to show: the earliest-ending active period wins over
    the next upcoming milestone.
    """
    active = sort_milestones_by_date(m for m in milestones if is_milestone_active(m, today))
    chosen = active[0] if active else find_next_milestone(milestones, today)
    if chosen is None:
        return None
    weeks_remaining = calculate_weeks_until(today, chosen.date)
    return MilestoneDisplay(
        milestone=chosen,
        weeks_remaining=weeks_remaining,
        text=format_milestone_text(chosen, weeks_remaining),
        progress=calculate_milestone_progress(chosen, today),
    )


def collect_relevant_milestones(
    yearly_milestones: Mapping[str, Sequence[Milestone]],
    selected_year: int,
    today: date,
) -> List[Milestone]:
    """Milestones stored under ``selected_year`` that are due today or later."""
    configured = yearly_milestones.get(str(selected_year)) or []
    return [milestone for milestone in configured if milestone.date >= today]


def create_milestone(
    name: str,
    target: date,
    milestone_type: MilestoneType = MilestoneType.EVENT,
    start_date: Optional[date] = None,
    milestone_id: Optional[str] = None,
) -> Milestone:
    return Milestone(
        id=milestone_id or str(uuid.uuid4()),
        name=name.strip(),
        date=target,
        type=milestone_type,
        start_date=start_date or None,
    )


def update_milestone_in_list(milestones: Sequence[Milestone], updated: Milestone) -> List[Milestone]:
    normalized = replace(updated, name=updated.name.strip(), start_date=updated.start_date or None)
    return [normalized if milestone.id == updated.id else milestone for milestone in milestones]


def remove_milestone_from_list(milestones: Sequence[Milestone], milestone_id: str) -> List[Milestone]:
    return [milestone for milestone in milestones if milestone.id != milestone_id]
