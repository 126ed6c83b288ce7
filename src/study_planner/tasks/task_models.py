# src/study_planner/tasks/task_models.py

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


class MalformedRecord(ValueError):
    """A stored task record could not be decoded."""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        if index is not None:
            message = f"record #{index}: {message}"
        super().__init__(message)
        self.index = index


@dataclass(slots=True, frozen=True)
class ReminderTime:
    """Wall-clock reminder (hour, minute) on the task's due day."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute out of range: {self.minute}")

    def to_str(self) -> str:
        # Stored without zero padding: 9:05 -> "9:5".
        return f"{self.hour}:{self.minute}"

    @classmethod
    def parse(cls, raw: str) -> ReminderTime:
        parts = raw.split(":")
        if len(parts) != 2:
            raise ValueError(f"expected '<hour>:<minute>', got {raw!r}")
        # Plain ASCII digits only: int() would also take "1_2", "+9" or "\u0669".
        hour_s, minute_s = (p.strip() for p in parts)
        for part in (hour_s, minute_s):
            if not (part.isascii() and part.isdigit()):
                raise ValueError(f"expected '<hour>:<minute>', got {raw!r}")
        return cls(hour=int(hour_s), minute=int(minute_s))

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    due_date: datetime
    reminder_time: ReminderTime | None = None
    is_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date.isoformat(),
            "reminderTime": self.reminder_time.to_str() if self.reminder_time is not None else None,
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Task:
        """
        Decode one stored record.

        Raises MalformedRecord for a missing/non-string id, title or description,
        an unparseable dueDate, a bad reminderTime or a non-bool isCompleted.
        A missing (or null) isCompleted means False: older records lack it.
        """
        if not isinstance(raw, Mapping):
            raise MalformedRecord(f"expected an object, got {type(raw).__name__}")

        fields: dict[str, str] = {}
        for key in ("id", "title", "description"):
            val = raw.get(key)
            if not isinstance(val, str):
                raise MalformedRecord(f"field {key!r} must be a string")
            fields[key] = val

        due_raw = raw.get("dueDate")
        if not isinstance(due_raw, str):
            raise MalformedRecord("field 'dueDate' must be a string")
        try:
            due_date = datetime.fromisoformat(due_raw)
        except ValueError as e:
            raise MalformedRecord(f"bad dueDate {due_raw!r}") from e

        reminder: ReminderTime | None = None
        rem_raw = raw.get("reminderTime")
        if rem_raw is not None:
            if not isinstance(rem_raw, str):
                raise MalformedRecord("field 'reminderTime' must be a string or null")
            try:
                reminder = ReminderTime.parse(rem_raw)
            except ValueError as e:
                raise MalformedRecord(f"bad reminderTime {rem_raw!r}") from e

        completed = raw.get("isCompleted")
        if completed is None:
            completed = False
        elif not isinstance(completed, bool):
            raise MalformedRecord("field 'isCompleted' must be a boolean")

        return cls(
            id=fields["id"],
            title=fields["title"],
            description=fields["description"],
            due_date=due_date,
            reminder_time=reminder,
            is_completed=completed,
        )


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def decode_tasks(text: str) -> list[Task]:
    """
    Decode a whole stored collection.

    All-or-nothing: one bad element fails the whole read.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedRecord(f"stored tasks are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise MalformedRecord(f"stored tasks must be a JSON array, got {type(data).__name__}")

    out: list[Task] = []
    for i, item in enumerate(data):
        try:
            out.append(Task.from_dict(item))
        except MalformedRecord as e:
            raise MalformedRecord(str(e), index=i) from e
    return out
