# src/say_to_plan/storage/sqlite_repo.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from ..core.errors import StorageError
from ..tasks.task_models import Task
from .task_codec import decode_tasks, encode_tasks, owner_key

logger = logging.getLogger(__name__)


class SQLiteTaskRepository:
    """
    SQLite key-value store: one row per owner, value is the encoded collection.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteTaskRepository ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open task database {self._db_path}: {e}") from e
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_collections (
                    owner_key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL DEFAULT '[]',
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(task_collections)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE task_collections ADD COLUMN {name} {decl}")
                logger.info("SQLiteTaskRepository migration: added column %s", name)

            add_col("payload", "TEXT NOT NULL DEFAULT '[]'")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot prepare task database {self._db_path}: {e}") from e
        finally:
            conn.close()

    # ---- public API ----

    def load(self, owner_id: str) -> list[Task]:
        key = owner_key(owner_id)
        try:
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                cur.execute("SELECT payload FROM task_collections WHERE owner_key = ?", (key,))
                row = cur.fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load tasks for {key}: {e}") from e

        tasks = decode_tasks(row["payload"] if row else None)
        logger.debug("Loaded %d tasks key=%s", len(tasks), key)
        return tasks

    def save(self, owner_id: str, tasks: list[Task]) -> None:
        key = owner_key(owner_id)
        payload = encode_tasks(tasks)
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO task_collections(owner_key, payload, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(owner_key) DO UPDATE SET
                        payload = excluded.payload,
                        updated_at = excluded.updated_at
                    """,
                    (key, payload, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save tasks for {key}: {e}") from e
        logger.debug("Saved %d tasks key=%s", len(tasks), key)

    def count_owners(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM task_collections")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()
