# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from freelist import bridge
from freelist.tasks.task_list import TaskList
from freelist.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bridge.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="freelist-test",
        log_level="INFO",
        configure_logging=False,
        data_dir=tmp_path,
        db_path=str(tmp_path / "freelist.db"),
        strict_timestamps=False,
    )


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "freelist.db"


@pytest.fixture()
def store(db_path: Path) -> Iterator[TaskStore]:
    s = TaskStore(db_path)
    yield s
    s.close()


@pytest.fixture()
def task_list(db_path: Path) -> Iterator[TaskList]:
    """TaskList over a real SQLite file; its correctness is what we test."""
    with TaskList(db_path) as tl:
        yield tl


@pytest.fixture()
def shared_bridge(settings: SimpleNamespace) -> Iterator[SimpleNamespace]:
    """Bridge initialised on a fresh in-memory database, torn down afterwards."""
    assert bridge.init_freelist_memory(settings=settings) == bridge.OK
    yield settings
    bridge.shutdown_freelist()
