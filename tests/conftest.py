# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from study_planner.core.state import AppState
from study_planner.tasks.task_models import ReminderTime, Task
from study_planner.tasks.task_store import TaskStore

from .fakes import InMemoryPreferenceStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="study-planner-test",
        data_dir=tmp_path,
        prefs_db_path=tmp_path / "prefs.sqlite3",
        reminder_window_minutes=60,
        console_enabled=False,
    )


@pytest.fixture()
def prefs() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture()
def store(prefs: InMemoryPreferenceStore) -> TaskStore:
    return TaskStore(prefs)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store)


def make_task(
    task_id: str = "t1",
    *,
    title: str = "Read chapter 3",
    description: str = "",
    due: datetime = datetime(2024, 3, 15),
    reminder: ReminderTime | None = None,
    completed: bool = False,
) -> Task:
    return Task(
        id=task_id,
        title=title,
        description=description,
        due_date=due,
        reminder_time=reminder,
        is_completed=completed,
    )
