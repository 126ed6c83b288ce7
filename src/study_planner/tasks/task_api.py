# src/study_planner/tasks/task_api.py

from __future__ import annotations

"""
Query and mutation helpers over a task list.

These work on a plain list snapshot returned by TaskStore.get_tasks().
Mutating helpers change the list in place; the caller writes it back.

Note the deliberate asymmetry:
- update_by_id replaces only the FIRST task with the id,
- delete_by_id removes EVERY task with the id.
"""

import uuid
from collections import defaultdict
from datetime import date, datetime

from .task_models import ReminderTime, Task


def _day(d: date | datetime) -> date:
    return d.date() if isinstance(d, datetime) else d


def is_due_on(task: Task, day: date | datetime) -> bool:
    d = _day(day)
    due = task.due_date
    return (due.year, due.month, due.day) == (d.year, d.month, d.day)


def tasks_due_on(tasks: list[Task], day: date | datetime) -> list[Task]:
    """Tasks whose due date falls on `day` (time of day ignored)."""
    return [t for t in tasks if is_due_on(t, day)]


def today_tasks(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    if now is None:
        now = datetime.now()
    # Wall-clock order; stored dates may mix naive and UTC ("...Z") values.
    return sorted(tasks_due_on(tasks, now), key=lambda t: t.due_date.time())


def tasks_by_day(tasks: list[Task], year: int, month: int) -> dict[date, list[Task]]:
    """Calendar markers: tasks grouped by due day for one month."""
    out: dict[date, list[Task]] = defaultdict(list)
    for t in tasks:
        if t.due_date.year == year and t.due_date.month == month:
            out[t.due_date.date()].append(t)
    return dict(sorted(out.items()))


def find_by_id(tasks: list[Task], task_id: str) -> Task | None:
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def update_by_id(tasks: list[Task], task_id: str, new_task: Task) -> bool:
    """Replace the first task with `task_id`. Returns False (list untouched) if none."""
    for i, t in enumerate(tasks):
        if t.id == task_id:
            tasks[i] = new_task
            return True
    return False


def delete_by_id(tasks: list[Task], task_id: str) -> int:
    """Remove every task with `task_id`. Returns how many were removed."""
    before = len(tasks)
    tasks[:] = [t for t in tasks if t.id != task_id]
    return before - len(tasks)


def new_task_id() -> str:
    return uuid.uuid4().hex


def new_task(
    *,
    title: str,
    due_date: datetime,
    description: str = "",
    reminder_time: ReminderTime | None = None,
) -> Task:
    """
    Build a fresh, not-yet-stored task.

    Input-layer validation lives here: the title must not be blank.
    """
    if not title or not title.strip():
        raise ValueError("title is required")

    return Task(
        id=new_task_id(),
        title=title.strip(),
        description=(description or "").strip(),
        due_date=due_date,
        reminder_time=reminder_time,
        is_completed=False,
    )


def edited_task(
    original: Task,
    *,
    title: str | None = None,
    description: str | None = None,
    due_date: datetime | None = None,
    reminder_time: ReminderTime | None = None,
    clear_reminder: bool = False,
) -> Task:
    """Copy of `original` with the given fields overwritten (id and completion kept)."""
    if title is not None and not title.strip():
        raise ValueError("title is required")

    reminder = original.reminder_time
    if clear_reminder:
        reminder = None
    elif reminder_time is not None:
        reminder = reminder_time

    return Task(
        id=original.id,
        title=title.strip() if title is not None else original.title,
        description=description.strip() if description is not None else original.description,
        due_date=due_date if due_date is not None else original.due_date,
        reminder_time=reminder,
        is_completed=original.is_completed,
    )
