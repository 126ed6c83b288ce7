# src/study_planner/tasks/reminders.py

from __future__ import annotations

"""
Reminder check.

Not a scheduler: one linear scan against "now", run by the caller when it
chooses (the console runs it once at startup). Nothing records which
reminders were already shown, so a task stays "due" for every check inside
its window.
"""

import logging
from datetime import datetime, timedelta

from ..core.ports import ReminderNotifier
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

REMINDER_WINDOW = timedelta(minutes=60)


def reminder_instant(task: Task) -> datetime | None:
    """Due day + reminder wall-clock time, or None when no reminder is set."""
    rt = task.reminder_time
    if rt is None:
        return None
    d = task.due_date
    return datetime(d.year, d.month, d.day, rt.hour, rt.minute)


def is_due_for_notification(
    task: Task,
    now: datetime,
    *,
    window: timedelta = REMINDER_WINDOW,
) -> bool:
    if task.is_completed:
        return False
    instant = reminder_instant(task)
    if instant is None:
        return False
    if now < instant:
        return False
    return now - instant < window


def due_reminders(
    tasks: list[Task],
    now: datetime,
    *,
    window: timedelta = REMINDER_WINDOW,
) -> list[Task]:
    return [t for t in tasks if is_due_for_notification(t, now, window=window)]


async def check_reminders(
    store: TaskStore,
    notifier: ReminderNotifier,
    *,
    now: datetime | None = None,
    window: timedelta = REMINDER_WINDOW,
) -> list[Task]:
    """
    One-shot reminder pass.

    - reminders disabled -> nothing is read, returns []
    - otherwise every due task is sent to notifier.notify(...) and returned

    A failing notify() is logged and the remaining tasks are still notified.
    MalformedRecord from the store propagates.
    """
    if not await store.get_reminders_enabled():
        logger.debug("Reminder check skipped: reminders disabled")
        return []

    if now is None:
        now = datetime.now()

    tasks = await store.get_tasks()
    due = due_reminders(tasks, now, window=window)
    logger.info("Reminder check: %d due of %d tasks", len(due), len(tasks))

    for task in due:
        try:
            await notifier.notify(task)
        except Exception:
            logger.exception("Reminder notify failed task_id=%s", task.id)

    return due
