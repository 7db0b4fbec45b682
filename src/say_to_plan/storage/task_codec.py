# src/say_to_plan/storage/task_codec.py

"""
JSON codec for a task collection.

Record shape (per task):
    {"id", "description", "completed", "createdAt", "dueDate", "ownerId"}

Timestamps are ISO-8601 with offset and microseconds so they decode back to the
exact same aware datetime. dueDate=null decodes to None (never to an epoch).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from ..core.errors import StorageError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

KEY_PREFIX = "tasks:"


def owner_key(owner_id: str) -> str:
    """Storage key for an owner's partition."""
    if not owner_id or not owner_id.strip():
        raise ValueError("owner_id is required")
    return f"{KEY_PREFIX}{owner_id}"


def _encode_ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec="microseconds")


def _decode_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        # Epoch milliseconds (legacy browser dumps).
        return datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc).astimezone()
    if not isinstance(raw, str):
        raise ValueError(f"not a timestamp: {raw!r}")
    value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.astimezone()
    return value


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "description": task.description,
        "completed": task.completed,
        "createdAt": _encode_ts(task.created_at),
        "dueDate": _encode_ts(task.due_date),
        "ownerId": task.owner_id,
    }


def record_to_task(record: dict[str, Any]) -> Task:
    created_at = _decode_ts(record.get("createdAt"))
    if created_at is None:
        raise ValueError("createdAt is required")

    return Task(
        id=str(record["id"]),
        description=str(record["description"]),
        completed=bool(record.get("completed", False)),
        created_at=created_at,
        owner_id=str(record["ownerId"]),
        due_date=_decode_ts(record.get("dueDate")),
    )


def encode_tasks(tasks: list[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)


def decode_tasks(payload: str | None) -> list[Task]:
    """
    Decode a stored collection.

    A payload that is not a JSON list raises StorageError; single malformed
    records are skipped with a warning so one bad row does not hide the rest.
    """
    if not payload:
        return []
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise StorageError(f"Stored task collection is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise StorageError("Stored task collection is not a list")

    out: list[Task] = []
    for i, rec in enumerate(data):
        if not isinstance(rec, dict):
            logger.warning("Skipping non-object task record at index %s", i)
            continue
        try:
            out.append(record_to_task(rec))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed task record at index %s: %s", i, e)
    return out
