# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from say_to_plan.config import Settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "SAYPLAN_USER_ID",
        "SAYPLAN_STORAGE_BACKEND",
        "SAYPLAN_DATA_DIR",
        "SAYPLAN_TASKS_DB_PATH",
        "SAYPLAN_TASKS_JSON_DIR",
        "SAYPLAN_VOICE_ENABLED",
        "SAYPLAN_VOICE_MAX_SECONDS",
        "SAYPLAN_VOICE_SAMPLE_RATE",
        "SAYPLAN_OPENAI_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.user_id is None
    assert s.storage_backend == "sqlite"
    assert s.data_dir == Path(".local/say_to_plan")
    assert s.tasks_db_path == s.data_dir / "tasks.sqlite3"
    assert s.tasks_json_dir == s.data_dir / "tasks"
    assert s.voice_enabled is True
    assert s.voice_language == "en"
    assert s.openai_api_key is None


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("SAYPLAN_USER_ID", "  alice ")
    clean_env.setenv("SAYPLAN_STORAGE_BACKEND", "JSON")
    clean_env.setenv("SAYPLAN_DATA_DIR", str(tmp_path))
    clean_env.setenv("SAYPLAN_VOICE_ENABLED", "off")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")

    s = Settings.from_env()

    assert s.user_id == "alice"
    assert s.storage_backend == "json"
    assert s.tasks_json_dir == tmp_path / "tasks"
    assert s.voice_enabled is False
    assert s.openai_api_key == "sk-test"


def test_bad_values_fall_back(clean_env) -> None:
    clean_env.setenv("SAYPLAN_STORAGE_BACKEND", "postgres")
    clean_env.setenv("SAYPLAN_VOICE_MAX_SECONDS", "0.1")
    clean_env.setenv("SAYPLAN_VOICE_SAMPLE_RATE", "fast")

    s = Settings.from_env()

    assert s.storage_backend == "sqlite"
    assert s.voice_max_seconds == 1.0
    assert s.voice_sample_rate == 16000
