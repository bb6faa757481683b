# src/freelist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task list.

TaskList depends on this Protocol instead of the concrete SQLite store,
so tests can swap in fakes and other backends can be plugged in.
"""

from typing import Protocol

from ..tasks.task_models import Task, TaskFilter


class TaskRepo(Protocol):
    def insert(self, task: Task) -> int: ...
    def fetch(self, task_filter: TaskFilter | None = None) -> list[Task]: ...
    def fetch_by_id(self, task_id: int) -> Task | None: ...
    def fetch_all_tags(self) -> list[str]: ...
    def update_status(self, task_id: int, done: bool) -> None: ...
    def delete(self, task_id: int) -> None: ...
    def clear_all(self) -> None: ...
    def close(self) -> None: ...
