# tests/test_task_models.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from freelist.tasks.task_models import (
    Task,
    TaskStatus,
    format_timestamp,
    parse_timestamp,
)


def test_new_task_defaults() -> None:
    task = Task.new("Buy milk")
    assert task.title == "Buy milk"
    assert task.id is None
    assert task.done is False
    assert task.details is None and task.tag is None
    assert task.due_date is None and task.parent_id is None
    assert task.is_recurring is False
    assert task.created_at == task.updated_at
    assert task.created_at.tzinfo is not None


@pytest.mark.parametrize("title", ["", "   "])
def test_new_task_requires_title(title: str) -> None:
    with pytest.raises(ValueError):
        Task.new(title)


def test_builders_return_modified_copy() -> None:
    base = Task.new("Write report")
    due = datetime(2030, 1, 2, 3, 4, 5, tzinfo=UTC)

    built = (
        base.with_details("quarterly numbers")
        .with_tag("work")
        .with_due_date(due)
        .with_parent(7)
        .with_recurring()
    )

    assert built is not base
    assert base.tag is None and base.details is None
    assert built.details == "quarterly numbers"
    assert built.tag == "work"
    assert built.due_date == due
    assert built.parent_id == 7
    assert built.is_recurring is True
    assert built.updated_at >= base.updated_at
    assert built.created_at == base.created_at


def test_with_due_date_normalizes_to_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    task = Task.new("x").with_due_date(datetime(2030, 1, 1, 12, 0, tzinfo=plus_two))
    assert task.due_date == datetime(2030, 1, 1, 10, 0, tzinfo=UTC)

    naive = Task.new("y").with_due_date(datetime(2030, 1, 1, 12, 0))
    assert naive.due_date == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


def test_mutators_refresh_updated_at() -> None:
    task = Task.new("Run")
    before = task.updated_at

    task.mark_done()
    assert task.done is True
    task.mark_undone()
    assert task.done is False

    task.set_estimated_duration(30)
    task.record_duration(45)
    assert task.estimated_duration == 30
    assert task.last_duration == 45
    assert task.updated_at >= before >= task.created_at


def test_is_overdue() -> None:
    now = datetime(2030, 6, 1, tzinfo=UTC)
    task = Task.new("Pay rent").with_due_date(now - timedelta(minutes=1))

    assert task.is_overdue(now) is True
    assert task.is_overdue(now - timedelta(hours=1)) is False

    task.mark_done()
    assert task.is_overdue(now) is False

    assert Task.new("No due date").is_overdue(now) is False


def test_is_subtask() -> None:
    assert Task.new("child").with_parent(1).is_subtask() is True
    assert Task.new("root").is_subtask() is False


def test_timestamp_format_is_fixed_width() -> None:
    whole = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert format_timestamp(whole) == "2025-01-02T03:04:05.000000+00:00"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-01-02T03:04:05+00:00", datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)),
        ("2025-01-02T03:04:05Z", datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)),
        (
            "2025-01-02T03:04:05.123456789+00:00",
            datetime(2025, 1, 2, 3, 4, 5, 123456, tzinfo=UTC),
        ),
        ("2025-01-02T05:04:05+02:00", datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)),
        ("2025-01-02t03:04:05.5z", datetime(2025, 1, 2, 3, 4, 5, 500000, tzinfo=UTC)),
    ],
)
def test_parse_timestamp_accepts_rfc3339(raw: str, expected: datetime) -> None:
    assert parse_timestamp(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "yesterday",
        "2025-13-45T00:00:00Z",
        "2024-03-05",
        "2024-03-05T10:00:00",
        "2024-03-05 10:00:00",
        "2024-03-05 10:00:00+00:00",
        "20240305T100000Z",
        " 2024-03-05T10:00:00Z",
        "2024-03-05T10:00Z",
    ],
)
def test_parse_timestamp_rejects_garbage(raw: str | None) -> None:
    assert parse_timestamp(raw) is None


def test_task_status_from_name() -> None:
    assert TaskStatus.from_name("done") is TaskStatus.DONE
    assert TaskStatus.from_name(" TODO ") is TaskStatus.TODO
    assert TaskStatus.from_name("all") is None
    assert TaskStatus.from_name(None) is None


def test_to_dict_uses_column_names() -> None:
    task = Task.new("Call Bob").with_tag("phone")
    data = task.to_dict()
    assert list(data) == [
        "id",
        "title",
        "details",
        "done",
        "due_date",
        "is_recurring",
        "estimated_duration",
        "last_duration",
        "tag",
        "parent_id",
        "created_at",
        "updated_at",
    ]
    assert data["tag"] == "phone"
    assert data["due_date"] is None
    assert parse_timestamp(data["created_at"]) == task.created_at


def test_constructor_normalizes_naive_datetimes_to_utc() -> None:
    task = Task(
        title="legacy",
        due_date=datetime(2020, 1, 1),
        created_at=datetime(2019, 1, 1),
        updated_at=datetime(2019, 6, 1),
    )
    assert task.due_date == datetime(2020, 1, 1, tzinfo=UTC)
    assert task.created_at == datetime(2019, 1, 1, tzinfo=UTC)
    assert task.updated_at == datetime(2019, 6, 1, tzinfo=UTC)

    assert task.is_overdue() is True
    task.mark_done()
    assert task.updated_at >= task.created_at
    assert task.is_overdue() is False


def test_updated_at_defaults_to_created_at() -> None:
    created = datetime(2024, 1, 1, tzinfo=UTC)
    task = Task(title="x", created_at=created)
    assert task.updated_at == created
    assert task.to_dict()["updated_at"] == "2024-01-01T00:00:00.000000+00:00"

    earlier = Task(title="y", created_at=created, updated_at=datetime(2023, 1, 1, tzinfo=UTC))
    assert earlier.updated_at == created
