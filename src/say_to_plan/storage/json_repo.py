# src/say_to_plan/storage/json_repo.py

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import re
from pathlib import Path

from ..core.errors import StorageError
from ..tasks.task_models import Task
from .task_codec import decode_tasks, encode_tasks, owner_key

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class JsonFileTaskRepository:
    """
    One JSON file per owner under `root`.

    File names are derived from the owner key: a readable slug plus a short hash,
    so two owner ids that slug the same still land in different files.
    Writes go through a temp file + os.replace.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("JsonFileTaskRepository ready dir=%s", self._root)

    def path_for(self, owner_id: str) -> Path:
        key = owner_key(owner_id)
        slug = _UNSAFE.sub("_", key)[:48]
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
        return self._root / f"{slug}-{digest}.json"

    def load(self, owner_id: str) -> list[Task]:
        path = self.path_for(owner_id)
        if not path.exists():
            return []
        try:
            payload = path.read_text("utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e
        return decode_tasks(payload)

    def save(self, owner_id: str, tasks: list[Task]) -> None:
        path = self.path_for(owner_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(encode_tasks(tasks), "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        with contextlib.suppress(OSError):
            # Task text is personal data; keep the file private on disk.
            os.chmod(path, 0o600)
        logger.debug("Saved %d tasks to %s", len(tasks), path)
