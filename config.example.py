# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets: keep the transcription API key in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "SAYPLAN_APP_NAME": "App display name (default: Say to Plan).",
    "SAYPLAN_LOG_LEVEL": "Logging level (default: INFO).",
    # Identity
    "SAYPLAN_USER_ID": "Sign in as this user at startup (empty => start signed out, use /login).",
    # Front-ends
    "SAYPLAN_CONSOLE_ENABLED": "Enable console front-end (true/false).",
    # Storage
    "SAYPLAN_STORAGE_BACKEND": "sqlite | json | memory (default: sqlite; unknown values => sqlite).",
    "SAYPLAN_DATA_DIR": "Local data directory (default: .local/say_to_plan).",
    "SAYPLAN_TASKS_DB_PATH": "Task SQLite path (default: <data_dir>/tasks.sqlite3).",
    "SAYPLAN_TASKS_JSON_DIR": "Per-user JSON files directory (default: <data_dir>/tasks).",
    # Voice capture
    "SAYPLAN_VOICE_ENABLED": "Enable microphone capture (true/false, default: true).",
    "SAYPLAN_VOICE_LANGUAGE": "Transcription language (default: en).",
    "SAYPLAN_VOICE_MAX_SECONDS": "Max recording length per utterance, >= 1 (default: 6).",
    "SAYPLAN_VOICE_SAMPLE_RATE": "Recording sample rate in Hz (default: 16000).",
    "SAYPLAN_VOICE_SILENCE_THRESHOLD": "Peak amplitude below which a recording counts as silence (default: 500).",
    # Transcription (OpenAI-compatible)
    "SAYPLAN_TRANSCRIBE_MODEL": "Speech-to-text model (default: whisper-1).",
    "SAYPLAN_OPENAI_API_KEY": "API key for transcription (falls back to OPENAI_API_KEY).",
    "SAYPLAN_OPENAI_BASE_URL": "Optional base URL of an OpenAI-compatible server (falls back to OPENAI_BASE_URL).",
}
