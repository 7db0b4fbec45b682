# src/say_to_plan/tasks/task_store.py

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from ..core.errors import StorageError, TaskOwnershipError, TaskValidationError
from ..core.ports import TaskRepo, WarningSink
from .task_models import Task, TaskStats
from .task_parser import local_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
TasksListener = Callable[[list[Task]], None]


def _clean_description(description: str | None) -> str:
    text = (description or "").strip()
    if not text:
        raise TaskValidationError("description is required")
    return text


class TaskStore:
    """
    In-memory task collection of the signed-in owner.

    - newest first, unique by id
    - every mutation persists the whole collection through the injected repo
    - a failed save is a warning: in-memory state stays the source of truth
    - without an owner, mutators are no-ops and views are empty

    Thread-safety:
    - one re-entrant lock around the collection (the voice worker may call in)
    """

    def __init__(
        self,
        repo: TaskRepo,
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
        on_warning: WarningSink | None = None,
    ) -> None:
        self._repo = repo
        self._clock = clock or local_now
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._on_warning = on_warning

        self._lock = threading.RLock()
        self._owner_id: str | None = None
        self._tasks: list[Task] = []
        self._listeners: list[TasksListener] = []

        self.last_persist_error: StorageError | None = None

    # ---- owner scope ----

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    def set_owner(self, owner_id: str | None) -> None:
        """
        Switch the active owner.

        None discards the in-memory collection (nothing is deleted from storage).
        A new owner gets their own partition loaded; a load failure leaves an
        empty collection and emits a warning.
        """
        owner_id = (owner_id or "").strip() or None
        with self._lock:
            if owner_id == self._owner_id:
                return

            if owner_id is None:
                logger.info("Owner cleared; discarding %d tasks from memory", len(self._tasks))
                self._owner_id = None
                self._tasks = []
                self._notify()
                return

            try:
                loaded = self._repo.load(owner_id)
            except StorageError as e:
                logger.warning("Failed to load tasks for owner=%s: %s", owner_id, e)
                self._warn(f"Could not load saved tasks: {e}")
                loaded = []

            foreign = [t for t in loaded if t.owner_id != owner_id]
            if foreign:
                logger.warning(
                    "Dropping %d tasks with a foreign owner from partition owner=%s",
                    len(foreign),
                    owner_id,
                )

            seen: set[str] = set()
            tasks: list[Task] = []
            for t in loaded:
                if t.owner_id != owner_id or t.id in seen:
                    continue
                seen.add(t.id)
                tasks.append(t)

            self._owner_id = owner_id
            self._tasks = tasks
            logger.info("Loaded %d tasks for owner=%s", len(tasks), owner_id)
            self._notify()

    # ---- change notification ----

    def subscribe(self, listener: TasksListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = list(self._tasks)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Task listener failed")

    def _warn(self, message: str) -> None:
        if self._on_warning is None:
            return
        try:
            self._on_warning(message)
        except Exception:
            logger.exception("Warning sink failed")

    def _commit(self, tasks: list[Task]) -> None:
        """Swap in the new collection, persist it, notify listeners."""
        owner_id = self._owner_id
        if owner_id is None:
            logger.debug("Commit skipped: no owner")
            return
        self._tasks = tasks
        try:
            self._repo.save(owner_id, list(tasks))
            self.last_persist_error = None
        except StorageError as e:
            self.last_persist_error = e
            logger.warning("Failed to persist tasks for owner=%s: %s", owner_id, e)
            self._warn("Your change is kept for this session but could not be saved.")
        self._notify()

    def _check_owner(self, owner_id: str | None) -> None:
        if owner_id is not None and owner_id != self._owner_id:
            raise TaskOwnershipError(f"owner {owner_id!r} cannot modify tasks of the active session")

    def _index_of(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id and t.owner_id == self._owner_id:
                return i
        return -1

    # ---- mutations ----

    def add_task(
        self,
        description: str,
        due_date: datetime | None = None,
        *,
        owner_id: str | None = None,
    ) -> Task | None:
        """Create a task at the front of the list. Returns None when nobody is signed in."""
        with self._lock:
            if self._owner_id is None:
                logger.debug("add_task ignored: no owner")
                return None
            self._check_owner(owner_id)
            text = _clean_description(description)

            task_id = self._id_factory()
            while self._index_of(task_id) >= 0:
                task_id = self._id_factory()

            task = Task(
                id=task_id,
                description=text,
                completed=False,
                created_at=self._clock(),
                owner_id=self._owner_id,
                due_date=due_date,
            )
            self._commit([task, *self._tasks])
            logger.info("Task added id=%s due=%s", task.id, due_date)
            return task

    def toggle_task(self, task_id: str, *, owner_id: str | None = None) -> Task | None:
        with self._lock:
            if self._owner_id is None:
                return None
            self._check_owner(owner_id)
            i = self._index_of(task_id)
            if i < 0:
                return None
            updated = replace(self._tasks[i], completed=not self._tasks[i].completed)
            tasks = list(self._tasks)
            tasks[i] = updated
            self._commit(tasks)
            logger.info("Task %s -> %s", task_id, "completed" if updated.completed else "pending")
            return updated

    def delete_task(self, task_id: str, *, owner_id: str | None = None) -> bool:
        with self._lock:
            if self._owner_id is None:
                return False
            self._check_owner(owner_id)
            i = self._index_of(task_id)
            if i < 0:
                return False
            tasks = list(self._tasks)
            del tasks[i]
            self._commit(tasks)
            logger.info("Task deleted id=%s", task_id)
            return True

    def edit_task(
        self,
        task_id: str,
        description: str,
        due_date: datetime | None = None,
        *,
        owner_id: str | None = None,
    ) -> Task | None:
        """Replace description and due date; id/created_at/completed/owner stay."""
        with self._lock:
            if self._owner_id is None:
                return None
            self._check_owner(owner_id)
            text = _clean_description(description)
            i = self._index_of(task_id)
            if i < 0:
                return None
            updated = replace(self._tasks[i], description=text, due_date=due_date)
            tasks = list(self._tasks)
            tasks[i] = updated
            self._commit(tasks)
            logger.info("Task edited id=%s due=%s", task_id, due_date)
            return updated

    # ---- views ----

    @property
    def tasks(self) -> list[Task]:
        with self._lock:
            return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            i = self._index_of(task_id)
            return self._tasks[i] if i >= 0 else None

    def find_by_prefix(self, prefix: str) -> list[Task]:
        prefix = (prefix or "").strip().lower()
        if not prefix:
            return []
        with self._lock:
            return [t for t in self._tasks if t.id.lower().startswith(prefix)]

    def pending(self) -> list[Task]:
        with self._lock:
            return [t for t in self._tasks if not t.completed]

    def completed(self) -> list[Task]:
        with self._lock:
            return [t for t in self._tasks if t.completed]

    def overdue(self, now: datetime | None = None) -> list[Task]:
        if now is None:
            now = self._clock()
        with self._lock:
            return [t for t in self._tasks if t.is_overdue(now)]

    def stats(self, now: datetime | None = None) -> TaskStats:
        if now is None:
            now = self._clock()
        with self._lock:
            done = sum(1 for t in self._tasks if t.completed)
            return TaskStats(
                total=len(self._tasks),
                pending=len(self._tasks) - done,
                completed=done,
                overdue=sum(1 for t in self._tasks if t.is_overdue(now)),
            )
