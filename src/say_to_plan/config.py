# src/say_to_plan/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (voice transcription key is optional).
- Everything local lives under the data dir (gitignored).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SAYPLAN"

STORAGE_BACKENDS = ("sqlite", "json", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Identity ----
    user_id: Optional[str]

    # ---- Front-ends ----
    console_enabled: bool

    # ---- Storage ----
    storage_backend: str
    data_dir: Path
    tasks_db_path: Path
    tasks_json_dir: Path

    # ---- Voice capture ----
    voice_enabled: bool
    voice_language: str
    voice_max_seconds: float
    voice_sample_rate: int
    voice_silence_threshold: int

    # ---- Transcription (OpenAI-compatible) ----
    transcribe_model: str
    openai_api_key: Optional[str]
    openai_base_url: Optional[str]

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Say to Plan")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        user_id = (_first_env(_k("USER_ID"), default="") or "").strip() or None

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "sqlite"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/say_to_plan"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        tasks_json_dir = _env_path(_k("TASKS_JSON_DIR"), data_dir / "tasks")

        voice_enabled = _env_bool(_k("VOICE_ENABLED"), True)
        # The speech engine is pinned to one language variant.
        voice_language = _env(_k("VOICE_LANGUAGE"), "en")
        voice_max_seconds = max(1.0, _env_float(_k("VOICE_MAX_SECONDS"), 6.0))
        voice_sample_rate = _env_int(_k("VOICE_SAMPLE_RATE"), 16000)
        voice_silence_threshold = _env_int(_k("VOICE_SILENCE_THRESHOLD"), 500)

        transcribe_model = _env(_k("TRANSCRIBE_MODEL"), "whisper-1")
        openai_api_key = _first_env(_k("OPENAI_API_KEY"), "OPENAI_API_KEY", default=None)
        openai_base_url = _first_env(_k("OPENAI_BASE_URL"), "OPENAI_BASE_URL", default=None)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            user_id=user_id,
            console_enabled=console_enabled,
            storage_backend=storage_backend,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            tasks_json_dir=tasks_json_dir,
            voice_enabled=voice_enabled,
            voice_language=voice_language,
            voice_max_seconds=voice_max_seconds,
            voice_sample_rate=voice_sample_rate,
            voice_silence_threshold=voice_silence_threshold,
            transcribe_model=transcribe_model,
            openai_api_key=openai_api_key,
            openai_base_url=openai_base_url,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
