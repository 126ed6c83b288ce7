# src/study_planner/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from ..core.ports import PreferenceStore
from .task_api import delete_by_id, find_by_id, update_by_id
from .task_models import Task, decode_tasks, encode_tasks

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
REMINDERS_ENABLED_KEY = "reminders_enabled"


class TaskStore:
    """
    Whole-collection task storage on top of a key-value PreferenceStore.

    The collection lives under one key as a JSON array and is rewritten
    in full on every save. Every mutation below is read -> change -> write:
    - no partial updates
    - no isolation between overlapping callers (last writer wins)

    Callers must await one mutation before starting the next.
    """

    def __init__(self, prefs: PreferenceStore) -> None:
        self._prefs = prefs

    # ---- collection ----

    async def get_tasks(self) -> list[Task]:
        """
        Load the full collection.

        Missing key -> [] (first run). A corrupt record raises MalformedRecord
        for the whole read.
        """
        raw = await self._prefs.get_string(TASKS_KEY)
        if raw is None:
            return []
        return decode_tasks(raw)

    async def save_tasks(self, tasks: Iterable[Task]) -> None:
        tasks = list(tasks)
        await self._prefs.set_string(TASKS_KEY, encode_tasks(tasks))
        logger.debug("Saved %d tasks", len(tasks))

    async def count_tasks(self) -> int:
        return len(await self.get_tasks())

    # ---- settings ----

    async def get_reminders_enabled(self) -> bool:
        val = await self._prefs.get_bool(REMINDERS_ENABLED_KEY)
        return True if val is None else bool(val)

    async def set_reminders_enabled(self, enabled: bool) -> None:
        await self._prefs.set_bool(REMINDERS_ENABLED_KEY, bool(enabled))
        logger.info("Reminders %s", "enabled" if enabled else "disabled")

    # ---- read-modify-write mutations ----

    async def add_task(self, task: Task) -> Task:
        tasks = await self.get_tasks()
        tasks.append(task)
        await self.save_tasks(tasks)
        logger.info("Task added id=%s due=%s", task.id, task.due_date.date())
        return task

    async def update_task(self, task: Task) -> bool:
        """Replace the first stored task with task.id. False (nothing written) if missing."""
        tasks = await self.get_tasks()
        if not update_by_id(tasks, task.id, task):
            logger.info("Task update skipped: id=%s not found", task.id)
            return False
        await self.save_tasks(tasks)
        logger.info("Task updated id=%s", task.id)
        return True

    async def set_completed(self, task_id: str, completed: bool) -> bool:
        tasks = await self.get_tasks()
        current = find_by_id(tasks, task_id)
        if current is None:
            logger.info("Task completion skipped: id=%s not found", task_id)
            return False
        update_by_id(tasks, task_id, replace(current, is_completed=bool(completed)))
        await self.save_tasks(tasks)
        logger.info("Task %s -> %s", task_id, "done" if completed else "open")
        return True

    async def delete_task(self, task_id: str) -> int:
        """Remove every stored task with task_id. Returns the number removed."""
        tasks = await self.get_tasks()
        removed = delete_by_id(tasks, task_id)
        if removed == 0:
            logger.info("Task delete skipped: id=%s not found", task_id)
            return 0
        await self.save_tasks(tasks)
        logger.info("Task deleted id=%s removed=%d", task_id, removed)
        return removed

    async def clear_tasks(self) -> None:
        await self.save_tasks([])
        logger.info("All tasks cleared")
