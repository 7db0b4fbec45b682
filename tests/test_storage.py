# tests/test_storage.py

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from say_to_plan.core.errors import StorageError
from say_to_plan.storage.json_repo import JsonFileTaskRepository
from say_to_plan.storage.memory_repo import InMemoryTaskRepository
from say_to_plan.storage.sqlite_repo import SQLiteTaskRepository
from say_to_plan.storage.task_codec import decode_tasks, encode_tasks, owner_key
from say_to_plan.tasks.task_models import Task

KYIV = timezone(timedelta(hours=3))


def _sample(owner: str = "alice") -> list[Task]:
    return [
        Task(
            id="b2",
            description="Call mom",
            completed=False,
            created_at=datetime(2026, 10, 14, 9, 15, 42, 123456, tzinfo=KYIV),
            owner_id=owner,
            due_date=datetime(2026, 10, 15, 23, 59, 59, 999000, tzinfo=KYIV),
        ),
        Task(
            id="a1",
            description="Купить молоко",
            completed=True,
            created_at=datetime(2026, 10, 13, 18, 0, 0, 1, tzinfo=timezone.utc),
            owner_id=owner,
            due_date=None,
        ),
    ]


@pytest.fixture(params=["memory", "sqlite", "json"])
def any_repo(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryTaskRepository()
    if request.param == "sqlite":
        return SQLiteTaskRepository(tmp_path / "tasks.sqlite3")
    return JsonFileTaskRepository(tmp_path / "tasks")


def test_round_trip_keeps_exact_timestamps_and_absent_due(any_repo) -> None:
    tasks = _sample()
    any_repo.save("alice", tasks)

    loaded = any_repo.load("alice")

    assert loaded == tasks
    assert loaded[0].created_at.utcoffset() == timedelta(hours=3)
    assert loaded[0].created_at.microsecond == 123456
    assert isinstance(loaded[0].due_date, datetime)
    assert loaded[1].due_date is None


def test_unknown_owner_loads_empty(any_repo) -> None:
    assert any_repo.load("nobody") == []


def test_owners_never_mix(any_repo) -> None:
    any_repo.save("alice", _sample("alice"))
    any_repo.save("bob", _sample("bob")[:1])

    assert {t.owner_id for t in any_repo.load("alice")} == {"alice"}
    assert len(any_repo.load("bob")) == 1

    any_repo.save("alice", [])
    assert any_repo.load("alice") == []
    assert len(any_repo.load("bob")) == 1


def test_empty_owner_id_is_rejected(any_repo) -> None:
    with pytest.raises(ValueError):
        any_repo.load("  ")


def test_sqlite_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    SQLiteTaskRepository(db).save("alice", _sample())

    again = SQLiteTaskRepository(db)
    assert again.load("alice") == _sample()
    assert again.count_owners() == 1


def test_json_files_are_per_owner_and_collision_free(tmp_path: Path) -> None:
    repo = JsonFileTaskRepository(tmp_path)
    assert repo.path_for("a/b") != repo.path_for("a_b")

    repo.save("a/b", _sample("a/b"))
    repo.save("a_b", [])
    assert len(repo.load("a/b")) == 2
    assert repo.load("a_b") == []


def test_json_corrupt_file_raises_storage_error(tmp_path: Path) -> None:
    repo = JsonFileTaskRepository(tmp_path)
    repo.path_for("alice").write_text("{not json", "utf-8")
    with pytest.raises(StorageError):
        repo.load("alice")


def test_owner_key_is_namespaced() -> None:
    assert owner_key("alice") == "tasks:alice"


def test_encoded_record_shape() -> None:
    records = json.loads(encode_tasks(_sample()))
    assert set(records[0]) == {"id", "description", "completed", "createdAt", "dueDate", "ownerId"}
    assert records[0]["createdAt"] == "2026-10-14T09:15:42.123456+03:00"
    assert records[1]["dueDate"] is None


def test_decode_accepts_browser_style_records() -> None:
    payload = json.dumps(
        [
            {
                "id": "1760000000000",
                "description": "Legacy",
                "completed": False,
                "createdAt": "2026-10-14T06:15:42.123Z",
                "ownerId": "alice",
            },
            {
                "id": "2",
                "description": "Epoch",
                "completed": False,
                "createdAt": 1760421342123,
                "dueDate": None,
                "ownerId": "alice",
            },
        ]
    )

    legacy, epoch = decode_tasks(payload)

    assert legacy.created_at == datetime(2026, 10, 14, 6, 15, 42, 123000, tzinfo=timezone.utc)
    assert legacy.due_date is None
    assert epoch.created_at == datetime.fromtimestamp(1760421342.123, tz=timezone.utc)
    assert epoch.due_date is None


def test_decode_naive_timestamp_is_made_aware() -> None:
    payload = json.dumps(
        [{"id": "1", "description": "x", "completed": False, "createdAt": "2026-10-14T09:00:00", "ownerId": "a"}]
    )
    (task,) = decode_tasks(payload)
    assert task.created_at.tzinfo is not None


def test_decode_skips_malformed_records() -> None:
    good = json.loads(encode_tasks(_sample()[:1]))[0]
    payload = json.dumps([good, {"id": "x"}, "junk", {**good, "id": "y", "createdAt": "not a date"}])

    tasks = decode_tasks(payload)
    assert [t.id for t in tasks] == ["b2"]


@pytest.mark.parametrize("payload", ["{oops", '{"id": 1}', "42"])
def test_decode_rejects_non_list_payload(payload: str) -> None:
    with pytest.raises(StorageError):
        decode_tasks(payload)


def test_decode_empty_payload() -> None:
    assert decode_tasks(None) == []
    assert decode_tasks("") == []
