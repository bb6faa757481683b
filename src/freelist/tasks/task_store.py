# src/freelist/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from .task_models import (
    Task,
    TaskFilter,
    TaskStatus,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

_COLUMNS = (
    "id, title, details, done, due_date, is_recurring, "
    "estimated_duration, last_duration, tag, parent_id, "
    "created_at, updated_at"
)


class StorageError(RuntimeError):
    """Any failure opening, preparing, executing or reading from the database."""


class TaskStore:
    """
    SQLite task store.

    Holds a single connection for its whole lifetime, which is what makes
    ":memory:" databases usable. The connection is not safe for concurrent
    use; callers sharing a store across threads must serialize access.

    Lenient on purpose in two places:
    - a malformed created_at/updated_at is replaced by the current time
      (unless strict_timestamps is set),
    - status updates and deletes of a missing id affect zero rows silently.
    """

    def __init__(self, db_path: str | Path = MEMORY_DB, *, strict_timestamps: bool = False) -> None:
        self._strict_timestamps = bool(strict_timestamps)
        self._label = str(db_path)
        try:
            if self._label != MEMORY_DB:
                path = Path(db_path)
                path.parent.mkdir(parents=True, exist_ok=True)
                self._label = str(path)
            self._conn = sqlite3.connect(self._label, check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot open database {self._label}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        try:
            self._ensure_schema()
            total = self.count_tasks()
        except StorageError:
            self.close()
            raise
        logger.info("TaskStore ready db=%s total=%s", self._label, total)

    @classmethod
    def in_memory(cls, *, strict_timestamps: bool = False) -> TaskStore:
        return cls(MEMORY_DB, strict_timestamps=strict_timestamps)

    @property
    def db_path(self) -> str:
        return self._label

    def close(self) -> None:
        with contextlib.suppress(sqlite3.Error):
            self._conn.close()

    def __enter__(self) -> TaskStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- low-level helpers ----

    @contextlib.contextmanager
    def _storage(self, action: str) -> Iterator[sqlite3.Connection]:
        """Run one unit of work in a transaction; backend errors become StorageError."""
        try:
            with self._conn:
                yield self._conn
        except sqlite3.Error as exc:
            raise StorageError(f"{action} failed: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self._storage("schema setup") as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    details TEXT,
                    done INTEGER NOT NULL DEFAULT 0,
                    due_date TEXT,
                    is_recurring INTEGER NOT NULL DEFAULT 0,
                    estimated_duration INTEGER,
                    last_duration INTEGER,
                    tag TEXT,
                    parent_id INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(parent_id) REFERENCES tasks(id)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_done ON tasks(done)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_tag ON tasks(tag)")

    def _read_timestamp(self, row: sqlite3.Row, column: str) -> datetime:
        raw = row[column]
        value = parse_timestamp(raw)
        if value is not None:
            return value
        if self._strict_timestamps:
            raise StorageError(f"malformed {column} {raw!r} for task id={row['id']}")
        logger.warning("Malformed %s %r for task id=%s; using current time", column, raw, row["id"])
        return utc_now()

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        created_at = self._read_timestamp(row, "created_at")
        updated_at = self._read_timestamp(row, "updated_at")
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            details=row["details"],
            done=int(row["done"] or 0) == 1,
            due_date=parse_timestamp(row["due_date"]),
            is_recurring=int(row["is_recurring"] or 0) == 1,
            estimated_duration=row["estimated_duration"],
            last_duration=row["last_duration"],
            tag=row["tag"],
            parent_id=row["parent_id"],
            created_at=created_at,
            updated_at=updated_at,
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._storage("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
        return int(n)

    def insert(self, task: Task) -> int:
        """Persist every field of task; created_at/updated_at are stamped now."""
        if not task.title or not task.title.strip():
            raise ValueError("title is required")

        now = format_timestamp(utc_now())
        with self._storage("insert") as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(
                    title, details, done, due_date, is_recurring,
                    estimated_duration, last_duration, tag, parent_id,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.title,
                    task.details,
                    1 if task.done else 0,
                    format_timestamp(task.due_date) if task.due_date else None,
                    1 if task.is_recurring else 0,
                    task.estimated_duration,
                    task.last_duration,
                    task.tag,
                    task.parent_id,
                    now,
                    now,
                ),
            )
        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for tasks insert")
        logger.debug("Task added id=%s tag=%s parent_id=%s", rowid, task.tag, task.parent_id)
        return int(rowid)

    def fetch(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """Tasks matching every condition of task_filter, newest first."""
        task_filter = task_filter or TaskFilter()
        conditions: list[str] = []
        params: list[Any] = []

        if task_filter.status == TaskStatus.DONE:
            conditions.append("done = 1")
        elif task_filter.status == TaskStatus.TODO:
            conditions.append("done = 0")

        if task_filter.tag is not None:
            conditions.append("tag = ?")
            params.append(task_filter.tag)

        if task_filter.parent_id is not None:
            conditions.append("parent_id = ?")
            params.append(int(task_filter.parent_id))

        sql = f"SELECT {_COLUMNS} FROM tasks"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC, id DESC"

        with self._storage("fetch") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_task(r) for r in rows]

    def fetch_by_id(self, task_id: int) -> Task | None:
        with self._storage("fetch by id") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (int(task_id),)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def fetch_all_tags(self) -> list[str]:
        with self._storage("fetch tags") as conn:
            rows = conn.execute(
                "SELECT DISTINCT tag FROM tasks WHERE tag IS NOT NULL AND tag != '' ORDER BY tag"
            ).fetchall()
        return [str(r["tag"]) for r in rows]

    def update_status(self, task_id: int, done: bool) -> None:
        now = format_timestamp(utc_now())
        with self._storage("update status") as conn:
            cur = conn.execute(
                "UPDATE tasks SET done = ?, updated_at = ? WHERE id = ?",
                (1 if done else 0, now, int(task_id)),
            )
        logger.debug("Task status id=%s done=%s rows=%s", task_id, done, cur.rowcount)

    def delete(self, task_id: int) -> None:
        """Delete a task and its direct subtasks; deeper descendants are left in place."""
        with self._storage("delete") as conn:
            conn.execute("DELETE FROM tasks WHERE parent_id = ?", (int(task_id),))
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
        logger.debug("Task deleted id=%s rows=%s", task_id, cur.rowcount)

    def clear_all(self) -> None:
        with self._storage("clear") as conn:
            cur = conn.execute("DELETE FROM tasks")
        logger.info("All tasks cleared rows=%s", cur.rowcount)
