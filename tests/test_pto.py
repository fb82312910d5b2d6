from __future__ import annotations

from datetime import date
from work_balance_tracker.models import CustomAbsenceType
from work_balance_tracker.models import DailyEntry
from work_balance_tracker.pto import archive_absence_type
from work_balance_tracker.pto import build_reassign_options
from work_balance_tracker.pto import calculate_absence_usage
from work_balance_tracker.pto import get_status_label
from work_balance_tracker.pto import reassign_entries_status
from work_balance_tracker.pto import remove_absence_type
from work_balance_tracker.pto import restore_absence_type

CUSTOM_TYPES = [
    CustomAbsenceType(id="training", name="Training", color="#00f"),
    CustomAbsenceType(id="parental", name="Parental leave", color="#0f0", archived=True),
]


def test_get_status_label() -> None:
    assert get_status_label("work", CUSTOM_TYPES) == "Work"
    assert get_status_label("sick", CUSTOM_TYPES) == "Sick"
    assert get_status_label("training", CUSTOM_TYPES) == "Training"
    assert get_status_label("unknown-id", CUSTOM_TYPES) == "unknown-id"


def test_calculate_absence_usage() -> None:
    entries = [
        DailyEntry(date=date(2024, 3, 1), status="training"),
        DailyEntry(date=date(2023, 5, 2), status="training"),
        DailyEntry(date=date(2024, 7, 9), status="training"),
        DailyEntry(date=date(2024, 7, 10), status="vacation"),
    ]
    usage = calculate_absence_usage(entries, "training")
    assert len(usage.affected_entries) == 3
    assert usage.yearly_counts == (("2023", 1), ("2024", 2))


def test_calculate_absence_usage_without_matches() -> None:
    usage = calculate_absence_usage([DailyEntry(date=date(2024, 1, 2))], "training")
    assert usage.affected_entries == ()
    assert usage.yearly_counts == ()


def test_archive_restore_and_remove() -> None:
    archived = archive_absence_type(CUSTOM_TYPES, "training")
    assert archived[0].archived
    assert not CUSTOM_TYPES[0].archived

    restored = restore_absence_type(archived, "parental")
    assert not restored[1].archived

    assert [item.id for item in remove_absence_type(CUSTOM_TYPES, "training")] == ["parental"]


def test_reassign_entries_status() -> None:
    entries = [DailyEntry(date=date(2024, 3, 1), status="training", notes="course")]
    reassigned = reassign_entries_status(entries, "holiday")
    assert reassigned[0].status == "holiday"
    assert reassigned[0].notes == "course"
    assert entries[0].status == "training"


def test_build_reassign_options_skips_archived_and_deleted_types() -> None:
    extra = CUSTOM_TYPES + [CustomAbsenceType(id="volunteer", name="Volunteering")]
    options = build_reassign_options(extra, deleting_type_id="training")
    assert [option.id for option in options] == ["work", "vacation", "holiday", "sick", "volunteer"]
    assert options[-1].label == "Volunteering"
