from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import List
from typing import Optional


class EntryStatus(str, Enum):
    WORK = "work"
    VACATION = "vacation"
    HOLIDAY = "holiday"
    SICK = "sick"


class MilestoneType(str, Enum):
    PERIOD = "period"
    EVENT = "event"


class TimeFormat(str, Enum):
    H12 = "12h"
    H24 = "24h"


def weekday_index(target: date) -> int:
    """Weekday of ``target`` with 0=Sunday .. 6=Saturday."""
    return target.isoweekday() % 7


@dataclass(frozen=True)
class WorkSchedule:
    """A schedule version, effective from ``effective_date`` until superseded."""

    effective_date: date
    weekly_hours: float
    work_days: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_days", frozenset(self.work_days))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effectiveDate": self.effective_date.isoformat(),
            "weeklyHours": self.weekly_hours,
            "workDays": sorted(self.work_days),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> WorkSchedule:
        return cls(
            effective_date=date.fromisoformat(payload["effectiveDate"]),
            weekly_hours=float(payload.get("weeklyHours", 0)),
            work_days=frozenset(int(day) for day in payload.get("workDays", [])),
        )


@dataclass(frozen=True)
class DailyEntry:
    """One logged day. ``status`` is an ``EntryStatus`` value or a custom absence id."""

    date: date
    start_time: str = ""
    end_time: str = ""
    lunch_minutes: int = 0
    extra_hours: float = 0.0
    status: str = EntryStatus.WORK.value
    notes: str = ""

    @property
    def is_work(self) -> bool:
        return self.status == EntryStatus.WORK.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "lunchMinutes": self.lunch_minutes,
            "extraHours": self.extra_hours,
            "status": self.status,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> DailyEntry:
        return cls(
            date=date.fromisoformat(payload["date"]),
            start_time=payload.get("startTime") or "",
            end_time=payload.get("endTime") or "",
            lunch_minutes=int(payload.get("lunchMinutes") or 0),
            extra_hours=float(payload.get("extraHours") or 0),
            status=str(payload.get("status") or EntryStatus.WORK.value),
            notes=payload.get("notes") or "",
        )


@dataclass(frozen=True)
class VacationSettings:
    year_start_month: int = 1
    year_start_day: int = 1
    allowance_days: float = 25
    yearly_allowances: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "yearStartMonth": self.year_start_month,
            "yearStartDay": self.year_start_day,
            "allowanceDays": self.allowance_days,
            "yearlyAllowances": dict(self.yearly_allowances),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> VacationSettings:
        return cls(
            year_start_month=int(payload.get("yearStartMonth", 1)),
            year_start_day=int(payload.get("yearStartDay", 1)),
            allowance_days=payload.get("allowanceDays", 25),
            yearly_allowances={
                str(year): days for year, days in (payload.get("yearlyAllowances") or {}).items()
            },
        )


@dataclass(frozen=True)
class Milestone:
    """A dated event, or a period spanning ``start_date`` .. ``date``."""

    id: str
    name: str
    date: date
    type: MilestoneType = MilestoneType.EVENT
    start_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "date": self.date.isoformat(),
            "type": self.type.value,
        }
        if self.start_date:
            payload["startDate"] = self.start_date.isoformat()
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Milestone:
        start_raw = payload.get("startDate")
        return cls(
            id=payload["id"],
            name=payload["name"],
            date=date.fromisoformat(payload["date"]),
            type=MilestoneType(payload.get("type", MilestoneType.EVENT.value)),
            start_date=date.fromisoformat(start_raw) if start_raw else None,
        )


@dataclass(frozen=True)
class CustomAbsenceType:
    id: str
    name: str
    color: str = ""
    archived: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color, "archived": self.archived}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> CustomAbsenceType:
        return cls(
            id=payload["id"],
            name=payload.get("name", payload["id"]),
            color=payload.get("color", ""),
            archived=bool(payload.get("archived", False)),
        )


@dataclass
class UserSettings:
    schedules: List[WorkSchedule] = field(default_factory=list)
    vacation: VacationSettings = field(default_factory=VacationSettings)
    tracking_start_date: Optional[date] = None
    yearly_comments: Dict[str, str] = field(default_factory=dict)
    custom_absence_types: List[CustomAbsenceType] = field(default_factory=list)
    absence_colors: Dict[str, str] = field(default_factory=dict)
    time_format: TimeFormat = TimeFormat.H24
    yearly_milestones: Dict[str, List[Milestone]] = field(default_factory=dict)


@dataclass
class UserDocument:
    uid: str
    email: str = ""
    settings: UserSettings = field(default_factory=UserSettings)
    created_at: str = ""


@dataclass
class AppConfig:
    """Local configuration: which user to act as, where data lives, default settings."""

    uid: str = "local"
    data_dir: Optional[Path] = None
    settings: UserSettings = field(default_factory=UserSettings)
