# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from say_to_plan.cli.bootstrap import create_initial_state
from say_to_plan.core.state import AppState
from say_to_plan.storage.memory_repo import InMemoryTaskRepository

from .fakes import FakeSpeechSource

# Wednesday, mid-afternoon; fixed offset so tests do not depend on the host timezone.
NOW = datetime(2026, 10, 14, 15, 30, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Say to Plan (test)",
        storage_backend="memory",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        tasks_json_dir=tmp_path / "tasks",
        user_id=None,
        voice_enabled=False,
    )


@pytest.fixture()
def speech() -> FakeSpeechSource:
    return FakeSpeechSource()


@pytest.fixture()
def repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture()
def state(settings: SimpleNamespace, repo: InMemoryTaskRepository, speech: FakeSpeechSource) -> AppState:
    """
    AppState wired with an in-memory repository and a scripted speech source.
    Signed out by default; tests sign in explicitly.
    """
    return create_initial_state(settings=settings, repo=repo, speech_source=speech)
