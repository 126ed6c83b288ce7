# src/study_planner/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import edited_task, new_task, tasks_by_day, tasks_due_on, today_tasks
from ..tasks.task_models import MalformedRecord, ReminderTime, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /today, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw_args: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw_args: bool = False,
    ) -> None:
        """
        raw_args=True hands the handler the untouched remainder of the line
        as a single argument (inner whitespace kept), or [] when empty.
        """
        aliases = aliases or []
        key = name.lower()
        names = [key] + [a.lower() for a in aliases]
        for n in names:
            self._handlers[n] = handler
            if raw_args:
                self._raw_args.add(n)
        self._help[key] = help_text

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Stored-data errors (MalformedRecord) and bad arguments (ValueError)
        become reply text; nothing escapes to the console loop.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""
        if name in self._raw_args:
            args = [rest] if rest else []
        else:
            args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)

            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except MalformedRecord:
            logger.exception("Stored tasks are corrupt (command=/%s)", name)
            return "Stored tasks could not be read (corrupt data). See the log for details."
        except ValueError as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / formatting ----

def parse_day(raw: str) -> datetime:
    """YYYY-MM-DD -> midnight datetime."""
    try:
        d = date.fromisoformat(raw.strip())
    except ValueError as e:
        raise ValueError(f"expected a date as YYYY-MM-DD, got {raw.strip()!r}") from e
    return datetime(d.year, d.month, d.day)


def parse_reminder(raw: str) -> ReminderTime:
    try:
        return ReminderTime.parse(raw.strip())
    except ValueError as e:
        raise ValueError(f"expected a time as HH:MM, got {raw.strip()!r}") from e


def _split_fields(raw: str, n: int = 4) -> list[str]:
    """Pipe-separated fields, padded with "" to n; inner whitespace is kept."""
    fields = [p.strip() for p in raw.split("|")]
    return fields + [""] * (n - len(fields))


def format_task(task: Task) -> str:
    mark = "x" if task.is_completed else " "
    line = f"[{mark}] {task.id[:SHORT_ID_LEN]}  {task.title}  (due {task.due_date:%b %d, %Y}"
    if task.reminder_time is not None:
        line += f", reminder {task.reminder_time}"
    line += ")"
    if task.description:
        line += f"\n      {task.description}"
    return line


def format_tasks(tasks: list[Task], empty: str) -> str:
    if not tasks:
        return empty
    return "\n".join(format_task(t) for t in tasks)


def resolve_task_id(state: AppState, raw: str) -> str | None:
    """Full id or a unique id prefix (as shown by format_task) -> full id."""
    if not raw:
        return None
    for t in state.tasks:
        if t.id == raw:
            return t.id
    matches = {t.id for t in state.tasks if t.id.startswith(raw)}
    if len(matches) == 1:
        return matches.pop()
    return None


# ---- handlers ----

async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_today(state: AppState, args: list[str]) -> str:
    await state.refresh()
    return format_tasks(today_tasks(state.tasks), "No tasks for today!")


async def cmd_day(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /day YYYY-MM-DD"
    day = parse_day(args[0])
    await state.refresh()
    return format_tasks(tasks_due_on(state.tasks, day), "No tasks for this date.")


async def cmd_month(state: AppState, args: list[str]) -> str:
    """
    /month           -> current month
    /month YYYY-MM   -> given month
    """
    if args:
        try:
            year_s, month_s = args[0].split("-")
            year, month = int(year_s), int(month_s)
        except ValueError as e:
            raise ValueError(f"expected a month as YYYY-MM, got {args[0]!r}") from e
        if not 1 <= month <= 12:
            raise ValueError(f"month out of range: {month}")
    else:
        now = datetime.now()
        year, month = now.year, now.month

    await state.refresh()
    by_day = tasks_by_day(state.tasks, year, month)
    if not by_day:
        return f"No tasks in {year:04d}-{month:02d}."
    lines = [f"Tasks in {year:04d}-{month:02d}:"]
    for day, tasks in by_day.items():
        open_n = sum(1 for t in tasks if not t.is_completed)
        lines.append(f"  {day.isoformat()}: {len(tasks)} task(s), {open_n} open")
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> | <description> | <YYYY-MM-DD> | <HH:MM>
    Only the title is required; the due date defaults to now.
    """
    if not args:
        return "Usage: /add <title> | <description> | <YYYY-MM-DD> | <HH:MM>"
    title, description, day_raw, time_raw = _split_fields(args[0])[:4]
    if not title:
        return "Usage: /add <title> | <description> | <YYYY-MM-DD> | <HH:MM>"

    due_date = parse_day(day_raw) if day_raw else datetime.now()
    reminder = parse_reminder(time_raw) if time_raw else None

    task = new_task(title=title, description=description, due_date=due_date, reminder_time=reminder)
    await state.task_store.add_task(task)
    await state.refresh()
    return f"Task added:\n{format_task(task)}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <title> | <description> | <YYYY-MM-DD> | <HH:MM or ->
    Empty fields keep the current value; "-" clears the description or the reminder.
    """
    head = args[0].split(maxsplit=1) if args else []
    if len(head) < 2:
        return "Usage: /edit <id> <title> | <description> | <YYYY-MM-DD> | <HH:MM or ->"
    raw_id, rest = head

    await state.refresh()
    task_id = resolve_task_id(state, raw_id)
    current = next((t for t in state.tasks if t.id == task_id), None)
    if current is None:
        return f"No task with id {raw_id}."

    title, description, day_raw, time_raw = _split_fields(rest)[:4]

    updated = edited_task(
        current,
        title=title or None,
        description="" if description == "-" else (description or None),
        due_date=parse_day(day_raw) if day_raw else None,
        reminder_time=parse_reminder(time_raw) if time_raw and time_raw != "-" else None,
        clear_reminder=time_raw == "-",
    )
    if not await state.task_store.update_task(updated):
        await state.refresh()
        return f"Task {raw_id} no longer exists."
    await state.refresh()
    return f"Task updated:\n{format_task(updated)}"


async def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    if not args:
        return f"Usage: /{'done' if completed else 'undone'} <id>"
    await state.refresh()
    task_id = resolve_task_id(state, args[0])
    if task_id is None or not await state.task_store.set_completed(task_id, completed):
        return f"No task with id {args[0]}."
    await state.refresh()
    return f"Task {task_id[:SHORT_ID_LEN]} marked {'done' if completed else 'open'}."


async def cmd_done(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, True)


async def cmd_undone(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, False)


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    await state.refresh()
    task_id = resolve_task_id(state, args[0])
    removed = await state.task_store.delete_task(task_id) if task_id else 0
    if not removed:
        return f"No task with id {args[0]}."
    await state.refresh()
    return f"Deleted {removed} task(s)."


async def cmd_reminders(state: AppState, args: list[str]) -> str:
    """
    /reminders      -> show status
    /reminders on   -> enable reminder check on startup
    /reminders off  -> disable it
    """
    if not args:
        enabled = await state.task_store.get_reminders_enabled()
        return f"Reminders are currently {'ON' if enabled else 'OFF'}. Use /reminders on or /reminders off."

    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        enabled = True
    elif arg in ("off", "0", "false", "no"):
        enabled = False
    else:
        return "Usage: /reminders on or /reminders off."

    await state.task_store.set_reminders_enabled(enabled)
    state.reminders_enabled = enabled
    return f"Reminders {'enabled' if enabled else 'disabled'}."


async def cmd_status(state: AppState, args: list[str]) -> str:
    await state.refresh()
    app_name = str(getattr(state.settings, "app_name", "study-planner"))
    return (
        "Status:\n"
        f"  App: {app_name}\n"
        f"  Reminders: {'ON' if state.reminders_enabled else 'OFF'}\n"
        f"  Storage: {getattr(state.settings, 'prefs_db_path', 'n/a')}\n"
        f"  Total tasks: {len(state.tasks)} tasks stored"
    )


async def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args or args[0].lower() != "confirm":
        return "This will delete all tasks and cannot be undone. Use /clear confirm."
    if emit:
        emit("Clearing all tasks...")
    await state.task_store.clear_tasks()
    await state.refresh()
    return "All data cleared."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("today", cmd_today, help_text="List tasks due today.")
registry.register("day", cmd_day, help_text="List tasks due on a date: /day YYYY-MM-DD.")
registry.register("month", cmd_month, help_text="Calendar overview: /month [YYYY-MM].", aliases=["cal"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add title | description | YYYY-MM-DD | HH:MM.",
    raw_args=True,
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit id title | description | YYYY-MM-DD | HH:MM or -.",
    raw_args=True,
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done id.")
registry.register("undone", cmd_undone, help_text="Mark a task open again: /undone id.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete id.", aliases=["rm"])
registry.register("reminders", cmd_reminders, help_text="Reminder check on startup: /reminders on | off.")
registry.register("status", cmd_status, help_text="Show settings and task count.")
registry.register("clear", cmd_clear, help_text="Delete all tasks: /clear confirm.")
