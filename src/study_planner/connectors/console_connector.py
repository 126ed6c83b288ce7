# src/study_planner/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from ..cli.commands import format_task, registry as command_registry
from ..core.state import AppState
from ..tasks.reminders import REMINDER_WINDOW, check_reminders
from ..tasks.task_models import MalformedRecord, Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleReminderNotifier:
    """ReminderNotifier that prints due reminders to the terminal."""

    async def notify(self, task: Task) -> None:
        _print_ts(f"[REMINDER] Reminder for: {task.title}\n{format_task(task)}")


async def run_startup_reminders(state: AppState) -> list[Task]:
    """Run the one-shot reminder check; corrupt data is reported, not raised."""
    minutes = int(getattr(state.settings, "reminder_window_minutes", 60) or 60)
    window = timedelta(minutes=minutes) if minutes > 0 else REMINDER_WINDOW
    try:
        return await check_reminders(state.task_store, ConsoleReminderNotifier(), window=window)
    except MalformedRecord:
        logger.exception("Reminder check failed: stored tasks are corrupt.")
        _print_ts("[REMINDER] Stored tasks could not be read; reminders skipped.")
        return []


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")

    try:
        await state.refresh()
    except MalformedRecord:
        logger.exception("Initial load failed: stored tasks are corrupt.")

    await run_startup_reminders(state)
    _print_ts("[CONSOLE] Use /help for commands, /today for today's tasks. Use /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Commands start with '/'. Use /help to list available commands."

        print(f"[{_ts_local()}] {cmd_response}")

    logger.info("Console connector finished.")
