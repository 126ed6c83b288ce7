# src/study_planner/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    task_store: TaskStore
    reminders_enabled: bool = True

    # Read snapshot of the stored collection; reloaded after every mutation.
    tasks: list[Task] = field(default_factory=list)

    async def refresh(self) -> None:
        self.tasks = await self.task_store.get_tasks()
        self.reminders_enabled = await self.task_store.get_reminders_enabled()
