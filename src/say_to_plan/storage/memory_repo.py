# src/say_to_plan/storage/memory_repo.py

from __future__ import annotations

from ..tasks.task_models import Task
from .task_codec import decode_tasks, encode_tasks, owner_key


class InMemoryTaskRepository:
    """
    Process-local repository (tests, demos, SAYPLAN_STORAGE_BACKEND=memory).

    Payloads are kept encoded so behaviour matches the on-disk backends.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def load(self, owner_id: str) -> list[Task]:
        return decode_tasks(self._items.get(owner_key(owner_id)))

    def save(self, owner_id: str, tasks: list[Task]) -> None:
        self._items[owner_key(owner_id)] = encode_tasks(tasks)

    def keys(self) -> list[str]:
        return sorted(self._items)
