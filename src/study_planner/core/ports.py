# src/study_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the preference backend and the reminder presentation swappable
and makes testing easier (in-memory fakes).
"""

from typing import Any, Awaitable, Protocol


class PreferenceStore(Protocol):
    """
    Local key-value persistence (strings and booleans).

    A missing key reads as None. Writes are durable once the awaitable completes.
    """

    def get_string(self, key: str) -> Awaitable[str | None]: ...
    def set_string(self, key: str, value: str) -> Awaitable[None]: ...
    def get_bool(self, key: str) -> Awaitable[bool | None]: ...
    def set_bool(self, key: str, value: bool) -> Awaitable[None]: ...


class ReminderNotifier(Protocol):
    """
    Presentation-side port: how the reminder check surfaces a due task.

    The console connector prints it; a GUI would show a dialog.
    """

    def notify(self, task: Any) -> Awaitable[None]: ...
