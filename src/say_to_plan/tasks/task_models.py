# src/say_to_plan/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Task:
    """
    A single persisted task.

    Notes:
    - Timestamps are timezone-aware datetimes.
    - due_date=None means "no deadline".
    - created_at/id/owner_id never change after creation (frozen; edits use replace()).
    """

    id: str
    description: str
    completed: bool
    created_at: datetime
    owner_id: str
    due_date: datetime | None = None

    def is_overdue(self, now: datetime) -> bool:
        return not self.completed and self.due_date is not None and self.due_date < now


@dataclass(frozen=True, slots=True)
class ParsedCandidate:
    """Parser output awaiting user confirmation (never persisted)."""

    description: str
    due_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    pending: int
    completed: int
    overdue: int

    @property
    def completion_rate(self) -> int:
        """Completed share in whole percent, halves rounded up (0 for an empty list)."""
        if self.total <= 0:
            return 0
        return int(self.completed * 100 / self.total + 0.5)
