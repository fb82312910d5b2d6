from __future__ import annotations

from datetime import date
from pathlib import Path
from work_balance_tracker.config import ConfigService
from work_balance_tracker.config import parse_settings
from work_balance_tracker.config import serialize_settings
from work_balance_tracker.models import AppConfig
from work_balance_tracker.models import Milestone
from work_balance_tracker.models import MilestoneType
from work_balance_tracker.models import TimeFormat
from work_balance_tracker.models import UserSettings
from work_balance_tracker.models import VacationSettings
from work_balance_tracker.models import WorkSchedule

import json
import logging

SETTINGS_PAYLOAD = {
    "schedules": [
        {"effectiveDate": "2023-01-01", "weeklyHours": 40, "workDays": [1, 2, 3, 4, 5]},
        {"effectiveDate": "2024-01-01", "weeklyHours": 32, "workDays": [1, 2, 3, 4]},
    ],
    "vacation": {"yearStartMonth": 4, "yearStartDay": 1, "allowanceDays": 28, "yearlyAllowances": {"2024": 30}},
    "trackingStartDate": "2023-01-02",
    "customPTO": [{"id": "training", "name": "Training", "color": "#00f"}],
    "ptoColors": {"vacation": "#0af"},
    "timeFormat": "12h",
    "yearlyMilestones": {
        "2026": [
            {"id": "q1", "name": "FY27 Q1", "date": "2026-04-30", "startDate": "2026-02-01", "type": "period"},
            {"id": "launch", "name": "Launch", "date": "2026-06-01", "type": "event"},
        ]
    },
}


def test_parse_settings() -> None:
    settings = parse_settings(SETTINGS_PAYLOAD)

    assert settings.schedules[1] == WorkSchedule(date(2024, 1, 1), 32, frozenset({1, 2, 3, 4}))
    assert settings.vacation == VacationSettings(4, 1, 28, {"2024": 30})
    assert settings.tracking_start_date == date(2023, 1, 2)
    assert settings.custom_absence_types[0].name == "Training"
    assert settings.absence_colors == {"vacation": "#0af"}
    assert settings.time_format == TimeFormat.H12
    q1 = settings.yearly_milestones["2026"][0]
    assert q1 == Milestone(
        id="q1",
        name="FY27 Q1",
        date=date(2026, 4, 30),
        type=MilestoneType.PERIOD,
        start_date=date(2026, 2, 1),
    )


def test_parse_settings_defaults() -> None:
    settings = parse_settings({})
    assert settings == UserSettings()
    assert settings.vacation.allowance_days == 25


def test_parse_settings_falls_back_on_invalid_values(caplog) -> None:
    payload = {
        "schedules": [{"weeklyHours": 40}, {"effectiveDate": "2023-01-01", "weeklyHours": 40, "workDays": [1]}],
        "timeFormat": "36h",
        "trackingStartDate": "yesterday",
        "yearlyMilestones": {"2026": [{"id": "x", "name": "X", "date": "2026-01-01", "type": "sprint"}]},
    }
    with caplog.at_level(logging.WARNING):
        settings = parse_settings(payload)

    assert len(settings.schedules) == 1
    assert settings.time_format == TimeFormat.H24
    assert settings.tracking_start_date is None
    assert settings.yearly_milestones == {"2026": []}
    assert "Unknown time format" in caplog.text


def test_settings_round_trip_through_serialization() -> None:
    settings = parse_settings(SETTINGS_PAYLOAD)
    assert parse_settings(serialize_settings(settings)) == settings


def test_load_without_file_returns_defaults(tmp_path: Path) -> None:
    service = ConfigService(tmp_path / "missing.json")
    assert service.load() == AppConfig()


def test_save_and_load(tmp_path: Path) -> None:
    service = ConfigService(tmp_path / "nested" / "config.json")
    config = AppConfig(uid="alex", data_dir=tmp_path / "store", settings=parse_settings(SETTINGS_PAYLOAD))
    service.save(config)

    raw = json.loads((tmp_path / "nested" / "config.json").read_text(encoding="utf-8"))
    assert raw["uid"] == "alex"
    assert raw["dataDir"] == str((tmp_path / "store").resolve())

    loaded = service.load()
    assert loaded.uid == "alex"
    assert loaded.settings == config.settings
    assert service.resolve_data_dir(loaded) == (tmp_path / "store").resolve()


def test_resolve_data_dir_defaults(tmp_path: Path) -> None:
    service = ConfigService(tmp_path / "config.json")
    assert service.resolve_data_dir(AppConfig()) == Path("data").resolve()


def test_parse_settings_skips_invalid_vacation_and_absence_types(caplog) -> None:
    payload = {
        "vacation": {"yearStartMonth": "April", "allowanceDays": 30},
        "customPTO": [{"name": "No id"}, "training", {"id": "training", "name": "Training"}],
    }
    with caplog.at_level(logging.WARNING):
        settings = parse_settings(payload)

    assert settings.vacation == VacationSettings()
    assert [item.id for item in settings.custom_absence_types] == ["training"]
    assert "Invalid vacation settings" in caplog.text
    assert "Skipping invalid absence type" in caplog.text


def test_load_survives_malformed_vacation(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"uid": "alex", "settings": {"vacation": {"yearStartDay": "first"}}}), encoding="utf-8")
    config = ConfigService(path).load()
    assert config.uid == "alex"
    assert config.settings.vacation == VacationSettings()
