# src/freelist/bridge.py

"""
Foreign-boundary adapter.

Flat functions over one shared TaskList for hosts that cannot hold Python
objects (native bridges, ctypes/cffi callbacks):
- every call runs under a single process-wide lock,
- optional text arguments use None (or "") for "absent",
- integer results use FAILURE (-1) for any error, >= 0 for success / ids,
- list results are JSON text, or None on failure.

Exceptions never cross this boundary; they are logged and turned into FAILURE.
This module holds the only global state in the package.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from .config import get_settings
from .logging_setup import setup_logging
from .tasks.task_list import TaskList
from .tasks.task_models import Task, TaskStatus, parse_timestamp

logger = logging.getLogger(__name__)

FAILURE = -1
OK = 0

_T = TypeVar("_T")

_lock = threading.Lock()
_task_list: TaskList | None = None


def _install(factory: Callable[[], TaskList], settings: Any) -> int:
    global _task_list

    with _lock:
        try:
            if getattr(settings, "configure_logging", False):
                level_name = str(getattr(settings, "log_level", "INFO")).upper()
                setup_logging(
                    log_dir=getattr(settings, "data_dir", ".local/freelist"),
                    console_level=getattr(logging, level_name, logging.INFO),
                )
            task_list = factory()
        except Exception:
            logger.exception("Failed to open task list")
            return FAILURE
        if _task_list is not None:
            _task_list.close()
        _task_list = task_list
    return OK


def _call(action: str, fn: Callable[[TaskList], _T], default: _T) -> _T:
    with _lock:
        if _task_list is None:
            logger.error("%s called before init_freelist", action)
            return default
        try:
            return fn(_task_list)
        except Exception:
            logger.exception("%s failed", action)
            return default


def _dump(items: list[Any]) -> str:
    return json.dumps(items, ensure_ascii=False)


# ---- lifecycle ----


def init_freelist(db_path: str | Path | None, *, settings: Any = None) -> int:
    """Open (or create) the database at db_path and make it the shared instance."""
    if db_path is None:
        logger.error("init_freelist called without a database path")
        return FAILURE
    if settings is None:
        settings = get_settings()
    strict = bool(getattr(settings, "strict_timestamps", False))
    return _install(lambda: TaskList(db_path, strict_timestamps=strict), settings)


def init_freelist_memory(*, settings: Any = None) -> int:
    if settings is None:
        settings = get_settings()
    strict = bool(getattr(settings, "strict_timestamps", False))
    return _install(lambda: TaskList.in_memory(strict_timestamps=strict), settings)


def shutdown_freelist() -> int:
    global _task_list

    with _lock:
        if _task_list is not None:
            _task_list.close()
            _task_list = None
    return OK


# ---- operations ----


def add_task(title: str, tag: str | None = None, due_date: str | None = None) -> int:
    def _add(tl: TaskList) -> int:
        task = Task.new(title)
        if tag:
            task = task.with_tag(tag)
        if due_date:
            parsed = parse_timestamp(due_date)
            if parsed is not None:
                task = task.with_due_date(parsed)
            else:
                logger.warning("Ignoring unparseable due date %r", due_date)
        return tl.add(task)

    return _call("add_task", _add, FAILURE)


def get_tasks_json(status_filter: str | None = None) -> str | None:
    """JSON array of tasks; status_filter is "todo", "done", or anything else for all."""
    status = TaskStatus.from_name(status_filter)

    def _get(tl: TaskList) -> str:
        if status is TaskStatus.TODO:
            tasks = tl.get_todo()
        elif status is TaskStatus.DONE:
            tasks = tl.get_completed()
        else:
            tasks = tl.all()
        return _dump([t.to_dict() for t in tasks])

    return _call("get_tasks_json", _get, None)


def get_tasks_by_tag_json(tag: str | None) -> str | None:
    if tag is None:
        return None
    return _call(
        "get_tasks_by_tag_json",
        lambda tl: _dump([t.to_dict() for t in tl.get_by_tag(tag)]),
        None,
    )


def get_all_tags_json() -> str | None:
    return _call("get_all_tags_json", lambda tl: _dump(tl.get_all_tags()), None)


def mark_task_done(task_id: int, done: int) -> int:
    def _mark(tl: TaskList) -> int:
        if done == 1:
            tl.mark_done(task_id)
        else:
            tl.mark_undone(task_id)
        return OK

    return _call("mark_task_done", _mark, FAILURE)


def delete_task(task_id: int) -> int:
    def _delete(tl: TaskList) -> int:
        tl.delete(task_id)
        return OK

    return _call("delete_task", _delete, FAILURE)


def clear_all_tasks() -> int:
    def _clear(tl: TaskList) -> int:
        tl.clear_all()
        return OK

    return _call("clear_all_tasks", _clear, FAILURE)
