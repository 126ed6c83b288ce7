# tests/test_bootstrap.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from study_planner.cli.bootstrap import create_initial_state
from study_planner.config import Settings
from study_planner.connectors.console_connector import run_startup_reminders
from study_planner.logging_setup import _ConsoleNoiseFilter, setup_logging
from study_planner.tasks.task_models import ReminderTime

from .conftest import make_task
from .fakes import InMemoryPreferenceStore


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("STUDY_PLANNER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STUDY_PLANNER_CONSOLE_ENABLED", "off")
    monkeypatch.setenv("STUDY_PLANNER_REMINDER_WINDOW_MINUTES", "-5")
    monkeypatch.delenv("STUDY_PLANNER_PREFS_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.prefs_db_path == tmp_path / "prefs.sqlite3"
    assert s.console_enabled is False
    assert s.reminder_window_minutes == 60


@pytest.mark.asyncio
async def test_create_initial_state_wires_sqlite_store(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)
    assert settings.prefs_db_path.exists()

    await state.refresh()
    assert state.tasks == []
    assert state.reminders_enabled is True

    task = make_task("s1", title="Essay outline")
    await state.task_store.add_task(task)
    await state.task_store.set_reminders_enabled(False)
    await state.refresh()
    assert state.tasks == [task]
    assert state.reminders_enabled is False

    # A second state over the same db file sees the persisted data.
    reopened = create_initial_state(settings=settings)
    await reopened.refresh()
    assert reopened.tasks == [task]
    assert reopened.reminders_enabled is False


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path, console_level=logging.WARNING)
    try:
        logging.getLogger("study_planner.test").debug("hello file")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "hello file" in log_file.read_text("utf-8")
    finally:
        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()


def test_console_filter_passes_own_logs_and_warnings() -> None:
    f = _ConsoleNoiseFilter()

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert f.filter(record("study_planner.tasks", logging.DEBUG))
    assert f.filter(record("py.warnings", logging.WARNING))
    assert not f.filter(record("asyncio", logging.WARNING))
    assert f.filter(record("asyncio", logging.ERROR))


@pytest.mark.asyncio
async def test_startup_reminders_print_due_tasks(
    settings: SimpleNamespace, capsys: pytest.CaptureFixture[str]
) -> None:
    prefs = InMemoryPreferenceStore()
    state = create_initial_state(settings=settings, prefs=prefs)
    assert await state.task_store.get_tasks() == []
    assert prefs.writes == 0

    # A task whose reminder was a minute ago is inside the window.
    ago = datetime.now() - timedelta(minutes=1)
    task = make_task("r1", title="Flashcards", due=ago, reminder=ReminderTime(ago.hour, ago.minute))
    await state.task_store.save_tasks([task])

    due = await run_startup_reminders(state)

    assert [t.id for t in due] == ["r1"]
    assert "Reminder for: Flashcards" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_startup_reminders_use_configured_window(settings: SimpleNamespace) -> None:
    prefs = InMemoryPreferenceStore()
    state = create_initial_state(settings=settings, prefs=prefs)

    ago = datetime.now() - timedelta(minutes=10)
    task = make_task("r2", due=ago, reminder=ReminderTime(ago.hour, ago.minute))
    await state.task_store.save_tasks([task])

    settings.reminder_window_minutes = 5
    assert await run_startup_reminders(state) == []

    settings.reminder_window_minutes = 60
    assert [t.id for t in await run_startup_reminders(state)] == ["r2"]
