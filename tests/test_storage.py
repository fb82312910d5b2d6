from __future__ import annotations

from datetime import date
from pathlib import Path
from work_balance_tracker.models import DailyEntry
from work_balance_tracker.models import UserDocument
from work_balance_tracker.models import UserSettings
from work_balance_tracker.models import VacationSettings
from work_balance_tracker.models import WorkSchedule
from work_balance_tracker.storage import entry_id
from work_balance_tracker.storage import InMemoryStore
from work_balance_tracker.storage import JsonFileStore
from work_balance_tracker.storage import parse_entry_id

import json
import pytest

UID = "user-1"


def make_entry(day: date, status: str = "work", notes: str = "") -> DailyEntry:
    return DailyEntry(date=day, start_time="09:00", end_time="17:00", lunch_minutes=30, status=status, notes=notes)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryStore()
    return JsonFileStore(tmp_path / "data")


def test_entry_id_round_trip() -> None:
    assert entry_id("abc_def", date(2024, 3, 1)) == "abc_def_2024-03-01"
    assert parse_entry_id("abc_def_2024-03-01") == ("abc_def", date(2024, 3, 1))


@pytest.mark.parametrize("value", ["2024-03-01", "_2024-03-01", "user_2024-13-01", "user"])
def test_parse_entry_id_rejects_malformed_values(value: str) -> None:
    with pytest.raises(ValueError):
        parse_entry_id(value)


def test_get_entries_filters_by_range_and_user(store) -> None:
    store.batch_save_entries(
        UID,
        [make_entry(date(2024, 2, 29)), make_entry(date(2024, 1, 31)), make_entry(date(2024, 3, 1))],
    )
    store.save_entry("someone-else", make_entry(date(2024, 2, 1)))

    result = store.get_entries(UID, date(2024, 1, 31), date(2024, 2, 29))
    assert [entry.date for entry in result] == [date(2024, 1, 31), date(2024, 2, 29)]
    assert store.get_entries("nobody", date(2024, 1, 1), date(2024, 12, 31)) == []


def test_save_entry_replaces_existing_day(store) -> None:
    store.save_entry(UID, make_entry(date(2024, 5, 6)))
    store.save_entry(UID, make_entry(date(2024, 5, 6), status="sick", notes="flu"))

    result = store.get_entries(UID, date(2024, 5, 1), date(2024, 5, 31))
    assert len(result) == 1
    assert result[0].status == "sick"
    assert result[0].notes == "flu"


def test_delete_entries(store) -> None:
    days = [date(2024, 5, 6), date(2024, 5, 7), date(2024, 6, 3)]
    store.batch_save_entries(UID, [make_entry(day) for day in days])

    store.delete_entry(UID, date(2024, 5, 6))
    store.batch_delete_entries(UID, [entry_id(UID, date(2024, 6, 3))])

    result = store.get_entries(UID, date(2024, 1, 1), date(2024, 12, 31))
    assert [entry.date for entry in result] == [date(2024, 5, 7)]


def test_batch_delete_rejects_foreign_ids(store) -> None:
    with pytest.raises(ValueError):
        store.batch_delete_entries(UID, [entry_id("other", date(2024, 6, 3))])


def test_users(store) -> None:
    assert store.get_user(UID) is None
    settings = UserSettings(
        schedules=[WorkSchedule(date(2023, 1, 1), 40, [1, 2, 3, 4, 5])],
        vacation=VacationSettings(allowance_days=30),
    )
    user = UserDocument(uid=UID, email="user@example.com", settings=settings, created_at="2024-01-01T00:00:00")
    store.save_user(user)

    loaded = store.get_user(UID)
    assert loaded == user


def test_json_store_writes_month_files(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.batch_save_entries(UID, [make_entry(date(2024, 5, 7)), make_entry(date(2024, 5, 6))])

    path = tmp_path / "entries" / UID / "2024-05.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert [item["date"] for item in payload] == ["2024-05-06", "2024-05-07"]
    assert payload[0]["lunchMinutes"] == 30

    store.batch_delete_entries(UID, [entry_id(UID, date(2024, 5, 6)), entry_id(UID, date(2024, 5, 7))])
    assert not path.exists()


def test_json_store_rejects_path_like_user_ids(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    with pytest.raises(ValueError):
        store.get_user("../escape")


def test_in_memory_store_accepts_plain_dict() -> None:
    store = InMemoryStore(entries={})
    store.save_entry(UID, make_entry(date(2023, 6, 5)))
    assert [entry.date for entry in store.get_entries(UID, date(2023, 6, 1), date(2023, 6, 30))] == [date(2023, 6, 5)]
