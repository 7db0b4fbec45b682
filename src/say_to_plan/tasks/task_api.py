# src/say_to_plan/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.errors import TaskValidationError
from ..core.state import AppState
from .task_models import ParsedCandidate, Task
from .task_parser import end_of_day, extract_due_date, local_now

logger = logging.getLogger(__name__)

_NO_DUE = {"", "none", "no", "-", "never"}


def parse_due_field(raw: str | None, *, now: datetime | None = None) -> datetime | None:
    """
    Parse the separate due-date field of the manual entry/edit form.

    Accepts YYYY-MM-DD (the form's date input) or the same phrases the
    transcript parser understands (today, tomorrow, next week, M/D).
    Empty/"none" means no due date. Anything else raises TaskValidationError.
    """
    text = (raw or "").strip()
    if text.lower() in _NO_DUE:
        return None
    if now is None:
        now = local_now()

    try:
        day = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        day = None
    if day is not None:
        return end_of_day(now.replace(year=day.year, month=day.month, day=day.day))

    rest, due = extract_due_date(text, now=now)
    if due is None or rest:
        raise TaskValidationError(f"Unrecognized due date: {text!r} (use YYYY-MM-DD, today, tomorrow, next week or M/D)")
    return due


def confirm_candidate(
    state: AppState,
    candidate: ParsedCandidate,
    *,
    description: str | None = None,
) -> Task | None:
    """
    Turn a (possibly edited) candidate into a stored task.

    An empty description is rejected here, not in the parser.
    """
    text = candidate.description if description is None else description
    task = state.task_store.add_task(text, candidate.due_date)
    if task is not None:
        logger.info("Candidate confirmed as task id=%s", task.id)
    return task


def add_manual_task(state: AppState, text: str, due_raw: str | None = None) -> Task | None:
    """Typed entry: description is taken verbatim, due date only from the separate field."""
    due = parse_due_field(due_raw)
    return state.task_store.add_task(text, due)


def format_due(task: Task, *, now: datetime | None = None) -> str:
    """Short due label as shown next to a task ('' when there is no due date)."""
    if task.due_date is None:
        return ""
    if now is None:
        now = local_now()

    due_day = task.due_date.astimezone(now.tzinfo).date()
    today = now.date()
    if task.is_overdue(now):
        label = "Overdue"
    elif due_day == today:
        label = "Today"
    elif due_day == today + timedelta(days=1):
        label = "Tomorrow"
    else:
        label = due_day.strftime("%b %d, %Y")
    return f"{label} ({due_day.isoformat()})"


def format_task_line(task: Task, *, now: datetime | None = None) -> str:
    mark = "x" if task.completed else " "
    due = format_due(task, now=now)
    suffix = f"  [due: {due}]" if due else ""
    return f"[{mark}] {task.id[:8]}  {task.description}{suffix}"
