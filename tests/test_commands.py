# tests/test_commands.py

from __future__ import annotations

import json
from datetime import datetime

import pytest

from study_planner.cli.commands import CommandRegistry, registry
from study_planner.core.state import AppState
from study_planner.tasks.task_models import ReminderTime
from study_planner.tasks.task_store import TASKS_KEY

from .conftest import make_task
from .fakes import InMemoryPreferenceStore


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    emitted: list[str] = []

    async def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/b y", emit=emitted.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert emitted == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")


@pytest.mark.asyncio
async def test_add_then_list_day(state: AppState) -> None:
    reply = await registry.handle(state, "/add Physics homework | problems 1-5 | 2024-03-15 | 9:30")
    assert reply is not None and reply.startswith("Task added")

    stored = await state.task_store.get_tasks()
    assert len(stored) == 1
    assert stored[0].title == "Physics homework"
    assert stored[0].description == "problems 1-5"
    assert stored[0].due_date == datetime(2024, 3, 15)
    assert stored[0].reminder_time == ReminderTime(9, 30)

    listing = await registry.handle(state, "/day 2024-03-15")
    assert "Physics homework" in (listing or "")
    assert "No tasks" in (await registry.handle(state, "/day 2024-03-16") or "")


@pytest.mark.asyncio
async def test_add_rejects_bad_input(state: AppState) -> None:
    assert "Usage" in (await registry.handle(state, "/add") or "")
    assert "Invalid input" in (await registry.handle(state, "/add Essay | | 2024-13-40") or "")
    assert await state.task_store.get_tasks() == []


@pytest.mark.asyncio
async def test_done_edit_delete_by_short_id(state: AppState) -> None:
    await state.task_store.save_tasks([make_task("abcdef1234", reminder=ReminderTime(8, 0))])

    assert "marked done" in (await registry.handle(state, "/done abcdef12") or "")
    assert (await state.task_store.get_tasks())[0].is_completed is True

    reply = await registry.handle(state, "/edit abcdef12 Renamed | | 2024-03-20 | -")
    assert reply is not None and reply.startswith("Task updated")
    task = (await state.task_store.get_tasks())[0]
    assert (task.title, task.due_date, task.reminder_time, task.is_completed) == (
        "Renamed",
        datetime(2024, 3, 20),
        None,
        True,
    )

    assert "Deleted 1" in (await registry.handle(state, "/delete abcdef12") or "")
    assert state.tasks == []


@pytest.mark.asyncio
async def test_unknown_id_is_reported(state: AppState) -> None:
    assert "No task with id" in (await registry.handle(state, "/done nope") or "")
    assert "No task with id" in (await registry.handle(state, "/delete nope") or "")


@pytest.mark.asyncio
async def test_reminders_toggle_and_status(state: AppState) -> None:
    assert "ON" in (await registry.handle(state, "/reminders") or "")
    assert await registry.handle(state, "/reminders off") == "Reminders disabled."
    assert await state.task_store.get_reminders_enabled() is False

    status = await registry.handle(state, "/status") or ""
    assert "Reminders: OFF" in status
    assert "0 tasks stored" in status


@pytest.mark.asyncio
async def test_clear_requires_confirmation(state: AppState) -> None:
    await state.task_store.save_tasks([make_task("a")])

    assert "confirm" in (await registry.handle(state, "/clear") or "")
    assert len(await state.task_store.get_tasks()) == 1

    assert await registry.handle(state, "/clear confirm") == "All data cleared."
    assert await state.task_store.get_tasks() == []


@pytest.mark.asyncio
async def test_corrupt_store_is_reported_not_raised(
    state: AppState, prefs: InMemoryPreferenceStore
) -> None:
    raw = make_task().to_dict()
    raw["reminderTime"] = "9"
    prefs.strings[TASKS_KEY] = json.dumps([raw])

    reply = await registry.handle(state, "/today")
    assert "could not be read" in (reply or "")


@pytest.mark.asyncio
async def test_month_overview(state: AppState) -> None:
    await state.task_store.save_tasks(
        [
            make_task("a", due=datetime(2024, 3, 1)),
            make_task("b", due=datetime(2024, 3, 1), completed=True),
            make_task("c", due=datetime(2024, 4, 2)),
        ]
    )
    reply = await registry.handle(state, "/month 2024-03") or ""
    assert "2024-03-01: 2 task(s), 1 open" in reply
    assert "2024-04-02" not in reply


@pytest.mark.asyncio
async def test_today_handles_mixed_naive_and_utc_dates(
    state: AppState, prefs: InMemoryPreferenceStore
) -> None:
    today = datetime.now().date().isoformat()
    naive = {**make_task("naive", title="Seminar").to_dict(), "dueDate": f"{today}T23:00:00.000"}
    utc = {**make_task("utc", title="Quiz").to_dict(), "dueDate": f"{today}T00:30:00.000Z"}
    prefs.strings[TASKS_KEY] = json.dumps([naive, utc])

    reply = await registry.handle(state, "/today") or ""
    assert reply.index("Quiz") < reply.index("Seminar")


@pytest.mark.asyncio
async def test_add_and_edit_keep_inner_spacing_and_clear_description(state: AppState) -> None:
    await registry.handle(state, "/add Lab  report   draft | read  Ch. 2 | 2024-03-15")
    task = (await state.task_store.get_tasks())[0]
    assert task.title == "Lab  report   draft"
    assert task.description == "read  Ch. 2"

    await registry.handle(state, f"/edit {task.id[:8]}  | - ")
    edited = (await state.task_store.get_tasks())[0]
    assert (edited.title, edited.description) == ("Lab  report   draft", "")

    assert "Usage" in (await registry.handle(state, f"/edit {task.id[:8]}") or "")
