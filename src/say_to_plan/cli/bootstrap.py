# src/say_to_plan/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the persistence backend,
- wires identity -> task store and speech source -> voice controller into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.identity import IdentitySession
from ..core.ports import SpeechSource, TaskRepo, WarningSink
from ..core.state import AppState
from ..storage.json_repo import JsonFileTaskRepository
from ..storage.memory_repo import InMemoryTaskRepository
from ..storage.sqlite_repo import SQLiteTaskRepository
from ..tasks.task_store import TaskStore
from ..voice.mic_source import MicrophoneSpeechSource
from ..voice.session import VoiceSessionController

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "sqlite":
        settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    elif settings.storage_backend == "json":
        settings.tasks_json_dir.mkdir(parents=True, exist_ok=True)


def create_task_repo(settings) -> TaskRepo:
    backend = str(getattr(settings, "storage_backend", "sqlite")).lower()
    if backend == "memory":
        return InMemoryTaskRepository()
    if backend == "json":
        return JsonFileTaskRepository(settings.tasks_json_dir)
    return SQLiteTaskRepository(settings.tasks_db_path)


def create_initial_state(
    *,
    settings=None,
    repo: TaskRepo | None = None,
    speech_source: SpeechSource | None = None,
    on_warning: WarningSink | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/repo/speech source injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if repo is None:
        _ensure_local_dirs(settings)
        repo = create_task_repo(settings)

    if speech_source is None and getattr(settings, "voice_enabled", False):
        speech_source = MicrophoneSpeechSource(settings)

    task_store = TaskStore(repo, on_warning=on_warning)
    identity = IdentitySession()
    identity.on_change(task_store.set_owner)

    state = AppState(
        settings=settings,
        identity=identity,
        task_store=task_store,
        voice=VoiceSessionController(speech_source),
    )

    user_id = getattr(settings, "user_id", None)
    if user_id:
        identity.sign_in(user_id)

    logger.info(
        "State ready backend=%s voice=%s user=%s",
        getattr(settings, "storage_backend", "?"),
        "on" if state.voice.available else "off",
        identity.user_id or "<signed out>",
    )
    return state
