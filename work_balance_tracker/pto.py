from __future__ import annotations

from .models import CustomAbsenceType
from .models import DailyEntry
from .models import EntryStatus
from collections import Counter
from dataclasses import dataclass
from dataclasses import replace
from datetime import date
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple

ALL_YEARS_START = date(1900, 1, 1)
ALL_YEARS_END = date(2100, 12, 31)

FIXED_STATUS_LABELS = {
    EntryStatus.WORK.value: "Work",
    EntryStatus.VACATION.value: "Vacation",
    EntryStatus.HOLIDAY.value: "Holiday",
    EntryStatus.SICK.value: "Sick",
}


@dataclass(frozen=True)
class AbsenceUsage:
    affected_entries: Tuple[DailyEntry, ...]
    yearly_counts: Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class ReassignOption:
    id: str
    label: str


def get_status_label(status: str, custom_types: Sequence[CustomAbsenceType]) -> str:
    fixed = FIXED_STATUS_LABELS.get(status)
    if fixed:
        return fixed
    for item in custom_types:
        if item.id == status:
            return item.name
    return status


def calculate_absence_usage(entries: Iterable[DailyEntry], status: str) -> AbsenceUsage:
    """Entries logged with ``status`` and how many fall in each calendar year."""
    affected = tuple(entry for entry in entries if entry.status == status)
    counts = Counter(str(entry.date.year) for entry in affected)
    return AbsenceUsage(affected_entries=affected, yearly_counts=tuple(sorted(counts.items())))


def archive_absence_type(custom_types: Sequence[CustomAbsenceType], type_id: str) -> List[CustomAbsenceType]:
    return [replace(item, archived=True) if item.id == type_id else item for item in custom_types]


def restore_absence_type(custom_types: Sequence[CustomAbsenceType], type_id: str) -> List[CustomAbsenceType]:
    return [replace(item, archived=False) if item.id == type_id else item for item in custom_types]


def remove_absence_type(custom_types: Sequence[CustomAbsenceType], type_id: str) -> List[CustomAbsenceType]:
    return [item for item in custom_types if item.id != type_id]


def reassign_entries_status(entries: Iterable[DailyEntry], target_status: str) -> List[DailyEntry]:
    return [replace(entry, status=target_status) for entry in entries]


def build_reassign_options(
    custom_types: Sequence[CustomAbsenceType],
    deleting_type_id: Optional[str] = None,
) -> List[ReassignOption]:
    """Statuses entries can be moved to before a custom type is deleted; archived types are not offered."""
    options = [ReassignOption(id=status, label=label) for status, label in FIXED_STATUS_LABELS.items()]
    options.extend(
        ReassignOption(id=item.id, label=item.name)
        for item in custom_types
        if not item.archived and item.id != deleting_type_id
    )
    return options
