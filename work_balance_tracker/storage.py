from __future__ import annotations

from .config import parse_settings
from .config import serialize_settings
from .models import DailyEntry
from .models import UserDocument
from collections import defaultdict
from dataclasses import dataclass
from dataclasses import field
from datetime import date
from pathlib import Path
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Protocol
from typing import Sequence
from typing import Tuple

import json
import logging

logger = logging.getLogger(__name__)


class EntryStore(Protocol):
    def get_entries(self, uid: str, start: date, end: date) -> List[DailyEntry]:
        """Return the user's entries between ``start`` and ``end`` inclusive, oldest first."""

    def get_user(self, uid: str) -> Optional[UserDocument]:
        """Return the user document or ``None`` when the user is unknown."""

    def save_user(self, user: UserDocument) -> None:
        """Create or replace the user document."""

    def save_entry(self, uid: str, entry: DailyEntry) -> None:
        """Create or replace the entry for ``entry.date``."""

    def delete_entry(self, uid: str, day: date) -> None:
        """Remove the entry for ``day`` if present."""

    def batch_save_entries(self, uid: str, entries: Sequence[DailyEntry]) -> None:
        """Create or replace several entries at once."""

    def batch_delete_entries(self, uid: str, entry_ids: Sequence[str]) -> None:
        """Remove the entries named by composite ids (see ``entry_id``)."""


def entry_id(uid: str, day: date) -> str:
    return f"{uid}_{day.isoformat()}"


def parse_entry_id(value: str) -> Tuple[str, date]:
    uid, separator, day_raw = value.rpartition("_")
    if not separator or not uid:
        raise ValueError(f"Malformed entry id: {value!r}")
    try:
        day = date.fromisoformat(day_raw)
    except ValueError as exc:
        raise ValueError(f"Malformed entry id: {value!r}") from exc
    return uid, day


def user_to_dict(user: UserDocument) -> dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "settings": serialize_settings(user.settings),
        "createdAt": user.created_at,
    }


def user_from_dict(payload: dict) -> UserDocument:
    return UserDocument(
        uid=payload["uid"],
        email=payload.get("email", ""),
        settings=parse_settings(payload.get("settings") or {}),
        created_at=payload.get("createdAt", ""),
    )


def _dates_for_ids(uid: str, entry_ids: Iterable[str]) -> List[date]:
    days: List[date] = []
    for value in entry_ids:
        owner, day = parse_entry_id(value)
        if owner != uid:
            raise ValueError(f"Entry id {value!r} does not belong to user {uid!r}")
        days.append(day)
    return days


@dataclass
class InMemoryStore:
    """Dictionary backed store, one instance per test or session."""

    users: Dict[str, UserDocument] = field(default_factory=dict)
    entries: Dict[str, Dict[date, DailyEntry]] = field(default_factory=dict)

    def get_entries(self, uid: str, start: date, end: date) -> List[DailyEntry]:
        user_entries = self.entries.get(uid, {})
        return [user_entries[day] for day in sorted(user_entries) if start <= day <= end]

    def get_user(self, uid: str) -> Optional[UserDocument]:
        return self.users.get(uid)

    def save_user(self, user: UserDocument) -> None:
        self.users[user.uid] = user

    def save_entry(self, uid: str, entry: DailyEntry) -> None:
        self.entries.setdefault(uid, {})[entry.date] = entry

    def delete_entry(self, uid: str, day: date) -> None:
        self.entries.get(uid, {}).pop(day, None)

    def batch_save_entries(self, uid: str, entries: Sequence[DailyEntry]) -> None:
        for entry in entries:
            self.save_entry(uid, entry)

    def batch_delete_entries(self, uid: str, entry_ids: Sequence[str]) -> None:
        for day in _dates_for_ids(uid, entry_ids):
            self.delete_entry(uid, day)


@dataclass
class JsonFileStore:
    """
    Stores each user document in ``users/<uid>.json`` and the user's entries
    in one file per month, ``entries/<uid>/YYYY-MM.json``.
    """

    base_dir: Path = Path("data")

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)
        (self.base_dir / "users").mkdir(parents=True, exist_ok=True)
        (self.base_dir / "entries").mkdir(parents=True, exist_ok=True)

    @staticmethod
    def month_key_from_date(target: date) -> str:
        return target.strftime("%Y-%m")

    def _user_path(self, uid: str) -> Path:
        return self.base_dir / "users" / f"{_checked_uid(uid)}.json"

    def _entries_dir(self, uid: str) -> Path:
        return self.base_dir / "entries" / _checked_uid(uid)

    def _month_path(self, uid: str, key: str) -> Path:
        return self._entries_dir(uid) / f"{key}.json"

    def _load_month(self, uid: str, key: str) -> Dict[date, DailyEntry]:
        path = self._month_path(uid, key)
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        entries = (DailyEntry.from_dict(item) for item in payload)
        return {entry.date: entry for entry in entries}

    def _save_month(self, uid: str, key: str, entries: Dict[date, DailyEntry]) -> None:
        path = self._month_path(uid, key)
        if not entries:
            if path.exists():
                path.unlink()
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        data = [entries[day].to_dict() for day in sorted(entries)]
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        logger.debug("Wrote %d entries to %s", len(data), path)

    def get_entries(self, uid: str, start: date, end: date) -> List[DailyEntry]:
        directory = self._entries_dir(uid)
        if not directory.exists():
            return []
        first_key = self.month_key_from_date(start)
        last_key = self.month_key_from_date(end)
        results: List[DailyEntry] = []
        for path in sorted(directory.glob("*.json")):
            if not first_key <= path.stem <= last_key:
                continue
            month = self._load_month(uid, path.stem)
            results.extend(month[day] for day in sorted(month) if start <= day <= end)
        return results

    def get_user(self, uid: str) -> Optional[UserDocument]:
        path = self._user_path(uid)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return user_from_dict(json.load(handle))

    def save_user(self, user: UserDocument) -> None:
        path = self._user_path(user.uid)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(user_to_dict(user), handle, indent=2)
        logger.debug("Saved user %s", user.uid)

    def save_entry(self, uid: str, entry: DailyEntry) -> None:
        self.batch_save_entries(uid, [entry])

    def delete_entry(self, uid: str, day: date) -> None:
        self._delete_days(uid, [day])

    def batch_save_entries(self, uid: str, entries: Sequence[DailyEntry]) -> None:
        buckets: Dict[str, List[DailyEntry]] = defaultdict(list)
        for entry in entries:
            buckets[self.month_key_from_date(entry.date)].append(entry)
        for key, month_entries in buckets.items():
            month = self._load_month(uid, key)
            for entry in month_entries:
                month[entry.date] = entry
            self._save_month(uid, key, month)

    def batch_delete_entries(self, uid: str, entry_ids: Sequence[str]) -> None:
        self._delete_days(uid, _dates_for_ids(uid, entry_ids))

    def _delete_days(self, uid: str, days: Iterable[date]) -> None:
        buckets: Dict[str, List[date]] = defaultdict(list)
        for day in days:
            buckets[self.month_key_from_date(day)].append(day)
        for key, month_days in buckets.items():
            month = self._load_month(uid, key)
            for day in month_days:
                month.pop(day, None)
            self._save_month(uid, key, month)


def _checked_uid(uid: str) -> str:
    if not uid or "/" in uid or "\\" in uid or uid in {".", ".."}:
        raise ValueError(f"Invalid user id: {uid!r}")
    return uid
