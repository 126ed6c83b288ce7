# src/study_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite preference store into TaskStore and AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import PreferenceStore
from ..core.state import AppState
from ..storage.prefs_store import SqlitePreferenceStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.prefs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, prefs: PreferenceStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the preference store injectable makes the app easier
    to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if prefs is None:
        _ensure_local_dirs(settings)
        prefs = SqlitePreferenceStore(settings.prefs_db_path)

    state = AppState(
        settings=settings,
        task_store=TaskStore(prefs),
    )
    logger.debug("AppState created prefs=%s", type(prefs).__name__)
    return state
