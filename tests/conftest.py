# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from agenda_client.core.state import AppState
from agenda_client.tasks.task_models import Priority, Task, TaskStatus
from agenda_client.tasks.task_store import TaskStore

from .fakes import FakePlannerGateway, FakeTaskGateway


def make_task(
    task_id: int,
    *,
    name: str | None = None,
    date: str = "2024-11-07",
    duration: int = 30,
    start: str | None = None,
    priority: Priority = Priority.MEDIUM,
    status: TaskStatus = TaskStatus.PENDING,
    depends_on: int | None = None,
) -> Task:
    return Task(
        id=task_id,
        name=name or f"task {task_id}",
        date=date,
        duration_minutes=duration,
        priority=priority,
        status=status,
        desired_start_time=start,
        depends_on_id=depends_on,
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and .env files.
    """
    return SimpleNamespace(
        app_name="agenda-test",
        log_level="DEBUG",
        api_base_url="http://agenda.test/api",
        user_id=1,
        request_timeout_seconds=2.0,
        connect_timeout_seconds=1.0,
        data_dir=tmp_path,
    )


@pytest.fixture()
def gateway() -> FakeTaskGateway:
    return FakeTaskGateway()


@pytest.fixture()
def planner() -> FakePlannerGateway:
    return FakePlannerGateway()


@pytest.fixture()
def state(settings: SimpleNamespace, gateway: FakeTaskGateway, planner: FakePlannerGateway) -> AppState:
    """
    AppState wired with in-memory gateways.

    The store is preloaded from the gateway so tests can seed gateway.tasks
    and call store.load(...) or let the operations refresh on their own.
    """
    return AppState(
        settings=settings,
        tasks=gateway,
        planner=planner,
        task_store=TaskStore(gateway),
    )


def seed(state: AppState, gateway: FakeTaskGateway, tasks: list[Task]) -> None:
    gateway.tasks = {t.id: t for t in tasks}
    state.task_store.load(tasks)
