# tests/test_task_api.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from say_to_plan.core.errors import TaskValidationError
from say_to_plan.tasks.task_api import (
    confirm_candidate,
    format_due,
    format_task_line,
    parse_due_field,
)
from say_to_plan.tasks.task_models import ParsedCandidate, Task
from say_to_plan.tasks.task_parser import end_of_day, start_of_day


def _task(now: datetime, due: datetime | None, *, completed: bool = False) -> Task:
    return Task(
        id="0123456789abcdef",
        description="Pay rent",
        completed=completed,
        created_at=now,
        owner_id="alice",
        due_date=due,
    )


@pytest.mark.parametrize("raw", [None, "", "  ", "none", "No", "-", "never"])
def test_parse_due_field_empty_means_no_due(raw, now: datetime) -> None:
    assert parse_due_field(raw, now=now) is None


def test_parse_due_field_accepts_form_date(now: datetime) -> None:
    due = parse_due_field("2026-10-20", now=now)
    assert due == end_of_day(now.replace(day=20))
    assert due is not None and due.tzinfo is not None


@pytest.mark.parametrize(
    ("raw", "days"),
    [("today", 0), ("Tomorrow", 1), ("next week", 7)],
)
def test_parse_due_field_accepts_phrases(raw: str, days: int, now: datetime) -> None:
    assert parse_due_field(raw, now=now) == end_of_day(now + timedelta(days=days))


def test_parse_due_field_accepts_month_day(now: datetime) -> None:
    assert parse_due_field("12/1", now=now) == start_of_day(now.replace(month=12, day=1))


@pytest.mark.parametrize("raw", ["someday", "tomorrow morning", "2026-13-01", "13/40"])
def test_parse_due_field_rejects_garbage(raw: str, now: datetime) -> None:
    with pytest.raises(TaskValidationError):
        parse_due_field(raw, now=now)


def test_format_due_labels(now: datetime) -> None:
    assert format_due(_task(now, None), now=now) == ""
    assert format_due(_task(now, end_of_day(now)), now=now) == "Today (2026-10-14)"
    assert format_due(_task(now, end_of_day(now + timedelta(days=1))), now=now) == "Tomorrow (2026-10-15)"
    assert format_due(_task(now, end_of_day(now + timedelta(days=6))), now=now) == "Oct 20, 2026 (2026-10-20)"
    assert format_due(_task(now, end_of_day(now - timedelta(days=2))), now=now) == "Overdue (2026-10-12)"


def test_completed_task_is_never_labelled_overdue(now: datetime) -> None:
    past = end_of_day(now - timedelta(days=2))
    assert format_due(_task(now, past, completed=True), now=now).startswith("Oct 12, 2026")


def test_format_task_line(now: datetime) -> None:
    line = format_task_line(_task(now, end_of_day(now), completed=True), now=now)
    assert line == "[x] 01234567  Pay rent  [due: Today (2026-10-14)]"
    assert format_task_line(_task(now, None), now=now) == "[ ] 01234567  Pay rent"


def test_confirm_candidate_uses_edit_and_keeps_due(state, now: datetime) -> None:
    state.identity.sign_in("alice")
    candidate = ParsedCandidate("Call mom", end_of_day(now))

    task = confirm_candidate(state, candidate, description="  Call mom and dad ")

    assert task is not None
    assert task.description == "Call mom and dad"
    assert task.due_date == candidate.due_date


def test_confirm_candidate_rejects_empty(state) -> None:
    state.identity.sign_in("alice")
    with pytest.raises(TaskValidationError):
        confirm_candidate(state, ParsedCandidate("   "))
    with pytest.raises(TaskValidationError):
        confirm_candidate(state, ParsedCandidate("Call mom"), description="")
    assert state.task_store.tasks == []


def test_confirm_candidate_signed_out_is_noop(state) -> None:
    assert confirm_candidate(state, ParsedCandidate("Call mom")) is None
