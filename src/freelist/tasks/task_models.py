# src/freelist/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

_RFC3339_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(dt: datetime) -> datetime:
    # Naive values are taken to already be UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_timestamp(dt: datetime) -> str:
    """
    RFC-3339 text as stored in the database.

    Always carries microseconds so that string order matches time order.
    """
    return _as_utc(dt).isoformat(timespec="microseconds")


def parse_timestamp(raw: str | None) -> datetime | None:
    """
    Parse an RFC-3339 timestamp into an aware UTC datetime.

    The offset is required ("Z" or "+HH:MM"); date-only, offset-less and
    space-separated forms are rejected. Fractions longer than six digits
    (nanosecond precision) are truncated. Returns None for empty or malformed
    input.
    """
    m = _RFC3339_RE.fullmatch(raw or "")
    if m is None:
        return None
    date, time, fraction, offset = m.groups()
    text = f"{date}T{time}"
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    text += "+00:00" if offset in ("Z", "z") else offset
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _as_utc(dt)


class TaskStatus(StrEnum):
    """Completion filter used by the store."""

    DONE = "done"
    TODO = "todo"

    @classmethod
    def from_name(cls, raw: str | None) -> TaskStatus | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class TaskFilter:
    """Conjunction of optional conditions; an empty filter matches every task."""

    status: TaskStatus | None = None
    tag: str | None = None
    parent_id: int | None = None


@dataclass(slots=True)
class Task:
    title: str
    id: int | None = None
    details: str | None = None
    done: bool = False
    due_date: datetime | None = None
    is_recurring: bool = False
    estimated_duration: int | None = None  # minutes
    last_duration: int | None = None  # minutes
    tag: str | None = None
    parent_id: int | None = None
    created_at: datetime = field(default_factory=utc_now)
    # None is filled in from created_at by __post_init__.
    updated_at: datetime = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        self.created_at = _as_utc(self.created_at)
        if self.due_date is not None:
            self.due_date = _as_utc(self.due_date)
        if self.updated_at is not None:
            self.updated_at = _as_utc(self.updated_at)
        if self.updated_at is None or self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @classmethod
    def new(cls, title: str) -> Task:
        if not title or not title.strip():
            raise ValueError("title is required")
        return cls(title=title)

    # ---- builders (return a modified copy) ----

    def with_details(self, details: str) -> Task:
        return replace(self, details=details, updated_at=utc_now())

    def with_tag(self, tag: str) -> Task:
        return replace(self, tag=tag, updated_at=utc_now())

    def with_due_date(self, due_date: datetime) -> Task:
        return replace(self, due_date=_as_utc(due_date), updated_at=utc_now())

    def with_parent(self, parent_id: int) -> Task:
        return replace(self, parent_id=int(parent_id), updated_at=utc_now())

    def with_recurring(self, is_recurring: bool = True) -> Task:
        return replace(self, is_recurring=bool(is_recurring), updated_at=utc_now())

    # ---- in-place mutators ----

    def _touch(self) -> None:
        self.updated_at = max(utc_now(), self.created_at)

    def mark_done(self) -> None:
        self.done = True
        self._touch()

    def mark_undone(self) -> None:
        self.done = False
        self._touch()

    def set_estimated_duration(self, minutes: int) -> None:
        self.estimated_duration = int(minutes)
        self._touch()

    def record_duration(self, minutes: int) -> None:
        self.last_duration = int(minutes)
        self._touch()

    # ---- derived ----

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.due_date is None or self.done:
            return False
        now = utc_now() if now is None else _as_utc(now)
        return now > self.due_date

    def is_subtask(self) -> bool:
        return self.parent_id is not None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping keyed by column name."""
        return {
            "id": self.id,
            "title": self.title,
            "details": self.details,
            "done": self.done,
            "due_date": format_timestamp(self.due_date) if self.due_date else None,
            "is_recurring": self.is_recurring,
            "estimated_duration": self.estimated_duration,
            "last_duration": self.last_duration,
            "tag": self.tag,
            "parent_id": self.parent_id,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
