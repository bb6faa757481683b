# src/freelist/tasks/task_list.py

"""
Task list facade used by external callers (CLI front ends, the bridge).

Every method is a thin filter + store call; errors from the store propagate
unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from ..core.ports import TaskRepo
from .task_models import Task, TaskFilter, TaskStatus
from .task_store import MEMORY_DB, TaskStore

logger = logging.getLogger(__name__)


class TaskList:
    def __init__(
        self,
        db_path: str | Path = MEMORY_DB,
        *,
        strict_timestamps: bool = False,
        repo: TaskRepo | None = None,
    ) -> None:
        if repo is None:
            repo = TaskStore(db_path, strict_timestamps=strict_timestamps)
        self._repo = repo

    @classmethod
    def in_memory(cls, *, strict_timestamps: bool = False) -> TaskList:
        return cls(MEMORY_DB, strict_timestamps=strict_timestamps)

    @classmethod
    def from_store(cls, repo: TaskRepo) -> TaskList:
        """Bind an already constructed repo (any TaskRepo implementation)."""
        return cls(repo=repo)

    def close(self) -> None:
        self._repo.close()

    def __enter__(self) -> TaskList:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- lifecycle ----

    def add(self, task: Task) -> int:
        """Persist task and return its new id. The caller's object is not modified."""
        return self._repo.insert(task)

    def mark_done(self, task_id: int) -> None:
        self._repo.update_status(task_id, True)

    def mark_undone(self, task_id: int) -> None:
        self._repo.update_status(task_id, False)

    def delete(self, task_id: int) -> None:
        self._repo.delete(task_id)

    def clear_all(self) -> None:
        self._repo.clear_all()

    # ---- queries ----

    def all(self) -> list[Task]:
        return self._repo.fetch(TaskFilter())

    def get_todo(self) -> list[Task]:
        return self._repo.fetch(TaskFilter(status=TaskStatus.TODO))

    def get_completed(self) -> list[Task]:
        return self._repo.fetch(TaskFilter(status=TaskStatus.DONE))

    def get_by_tag(self, tag: str) -> list[Task]:
        return self._repo.fetch(TaskFilter(tag=tag))

    def get_subtasks(self, parent_id: int) -> list[Task]:
        return self._repo.fetch(TaskFilter(parent_id=parent_id))

    def get_by_id(self, task_id: int) -> Task | None:
        return self._repo.fetch_by_id(task_id)

    def get_all_tags(self) -> list[str]:
        return self._repo.fetch_all_tags()

    def get_overdue(self, now: datetime | None = None) -> list[Task]:
        """Open tasks whose due date has passed; filtered in memory, not in SQL."""
        overdue = [t for t in self.get_todo() if t.is_overdue(now)]
        logger.debug("Overdue tasks: %d", len(overdue))
        return overdue
