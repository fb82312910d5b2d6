from __future__ import annotations

from .models import AppConfig
from .models import CustomAbsenceType
from .models import Milestone
from .models import TimeFormat
from .models import UserSettings
from .models import VacationSettings
from .models import WorkSchedule
from datetime import date
from pathlib import Path
from typing import Any
from typing import Dict
from typing import List

import json
import logging

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")


class ConfigService:
    """Loads and exposes the local tracker configuration."""

    def __init__(self, path: Path | str = "config.json") -> None:
        self.path = Path(path)

    def default_data_dir(self) -> Path:
        return self.normalize_data_dir(DEFAULT_DATA_DIR)

    def normalize_data_dir(self, value: Path | str) -> Path:
        path = Path(value).expanduser()
        return path.resolve()

    def resolve_data_dir(self, config: AppConfig) -> Path:
        if config.data_dir:
            return self.normalize_data_dir(config.data_dir)
        return self.default_data_dir()

    def load(self) -> AppConfig:
        if not self.path.exists():
            logger.debug("No configuration at %s, using defaults", self.path)
            return AppConfig()

        with self.path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        data_dir_raw = payload.get("dataDir")
        return AppConfig(
            uid=str(payload.get("uid") or "local"),
            data_dir=self.normalize_data_dir(data_dir_raw) if data_dir_raw else None,
            settings=parse_settings(payload.get("settings") or {}),
        )

    def save(self, config: AppConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, Any] = {
            "uid": config.uid,
            "settings": serialize_settings(config.settings),
        }
        if config.data_dir:
            resolved_value = Path(config.data_dir).expanduser().resolve()
            if resolved_value != self.default_data_dir():
                payload["dataDir"] = str(resolved_value)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        logger.debug("Saved configuration to %s", self.path)


def parse_settings(payload: Dict[str, Any]) -> UserSettings:
    """
    Build ``UserSettings`` from a settings document.

    Unknown time formats fall back to 24h and invalid vacation settings to the
    defaults. Schedules, milestones and absence types that cannot be parsed are
    skipped with a warning rather than failing the load.
    """
    schedules: List[WorkSchedule] = []
    for item in payload.get("schedules") or []:
        try:
            schedules.append(WorkSchedule.from_dict(item))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping invalid schedule: %r", item)

    time_format_raw = payload.get("timeFormat", TimeFormat.H24.value)
    try:
        time_format = TimeFormat(time_format_raw)
    except ValueError:
        logger.warning("Unknown time format %r, using 24h", time_format_raw)
        time_format = TimeFormat.H24

    tracking_raw = payload.get("trackingStartDate")
    try:
        tracking_start = date.fromisoformat(tracking_raw) if tracking_raw else None
    except ValueError:
        logger.warning("Ignoring invalid tracking start date %r", tracking_raw)
        tracking_start = None

    yearly_milestones: Dict[str, List[Milestone]] = {}
    for year, items in (payload.get("yearlyMilestones") or {}).items():
        milestones: List[Milestone] = []
        for item in items or []:
            try:
                milestones.append(Milestone.from_dict(item))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping invalid milestone in %s: %r", year, item)
        yearly_milestones[str(year)] = milestones

    vacation_raw = payload.get("vacation") or {}
    try:
        vacation = VacationSettings.from_dict(vacation_raw)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Invalid vacation settings %r, using defaults", vacation_raw)
        vacation = VacationSettings()

    custom_absence_types: List[CustomAbsenceType] = []
    for item in payload.get("customPTO") or []:
        try:
            custom_absence_types.append(CustomAbsenceType.from_dict(item))
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Skipping invalid absence type: %r", item)

    return UserSettings(
        schedules=schedules,
        vacation=vacation,
        tracking_start_date=tracking_start,
        yearly_comments={str(year): text for year, text in (payload.get("yearlyComments") or {}).items()},
        custom_absence_types=custom_absence_types,
        absence_colors=dict(payload.get("ptoColors") or {}),
        time_format=time_format,
        yearly_milestones=yearly_milestones,
    )


def serialize_settings(settings: UserSettings) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "schedules": [schedule.to_dict() for schedule in settings.schedules],
        "vacation": settings.vacation.to_dict(),
        "yearlyComments": dict(settings.yearly_comments),
        "customPTO": [item.to_dict() for item in settings.custom_absence_types],
        "ptoColors": dict(settings.absence_colors),
        "timeFormat": settings.time_format.value,
        "yearlyMilestones": {
            year: [milestone.to_dict() for milestone in milestones]
            for year, milestones in settings.yearly_milestones.items()
        },
    }
    if settings.tracking_start_date:
        payload["trackingStartDate"] = settings.tracking_start_date.isoformat()
    return payload
