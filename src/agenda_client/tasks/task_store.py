# src/agenda_client/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..core.ports import TaskGateway
from .task_models import Priority, Task, TaskStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TaskFilter:
    """Active list filters. None means "any"."""

    date: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None

    @property
    def is_empty(self) -> bool:
        return self.date is None and self.status is None and self.priority is None

    def matches(self, task: Task) -> bool:
        if self.date is not None and task.date != self.date:
            return False
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        return True


@dataclass(slots=True, frozen=True)
class TaskStatistics:
    total: int
    pending: int
    planned: int
    completed: int
    by_priority: dict[Priority, int] = field(default_factory=dict)

    @property
    def open(self) -> int:
        """Tasks a plan can still pick up (pending + planned)."""
        return self.pending + self.planned

    def as_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "pending": self.pending,
            "planned": self.planned,
            "completed": self.completed,
            "by_priority": {
                "high": self.by_priority.get(Priority.HIGH, 0),
                "medium": self.by_priority.get(Priority.MEDIUM, 0),
                "low": self.by_priority.get(Priority.LOW, 0),
            },
        }


class TaskStore:
    """
    In-memory snapshot of the task service.

    The server is the source of truth: after every mutation the whole
    collection is re-fetched with refresh(). There are no incremental
    updates, so the snapshot never drifts from what the server returned.

    Lookups answer from the snapshot only and never touch the network.
    Insertion order is the order the server listed the tasks in.
    """

    def __init__(self, gateway: TaskGateway | None = None) -> None:
        self._gateway = gateway
        self._tasks: dict[int, Task] = {}
        self._loaded = False

    # ---- lifecycle ----

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def refresh(self) -> list[Task]:
        """Replace the snapshot with the full task list from the service."""
        if self._gateway is None:
            raise RuntimeError("TaskStore has no gateway to refresh from")
        tasks = await self._gateway.list_tasks()
        self.load(tasks)
        logger.debug("TaskStore refreshed total=%s", len(self._tasks))
        return self.all()

    def load(self, tasks: Iterable[Task]) -> None:
        self._tasks = {t.id: t for t in tasks}
        self._loaded = True

    def clear(self) -> None:
        self._tasks = {}
        self._loaded = False

    # ---- queries ----

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def all(self) -> list[Task]:
        return list(self._tasks.values())

    def find_by_id(self, task_id: int | None) -> Task | None:
        if task_id is None:
            return None
        return self._tasks.get(task_id)

    def find_dependents(self, task_id: int) -> list[Task]:
        """Direct dependents: tasks whose depends_on_id is task_id, in store order."""
        return [t for t in self._tasks.values() if t.depends_on_id == task_id]

    def filter(self, criteria: TaskFilter | None = None, **kwargs) -> list[Task]:
        """
        Fresh filtered list; the snapshot itself is never modified.

        Accepts a TaskFilter or the same fields as keyword arguments.
        """
        if criteria is None:
            criteria = TaskFilter(**kwargs)
        return [t for t in self._tasks.values() if criteria.matches(t)]

    def display_name(self, task_id: int) -> str:
        task = self._tasks.get(task_id)
        return task.name if task else f"Task #{task_id}"

    def dependency_candidates(self, task_id: int | None = None) -> list[Task]:
        """Tasks offered as prerequisites for task_id (everything but itself)."""
        return [t for t in self._tasks.values() if t.id != task_id]

    def statistics(self) -> TaskStatistics:
        # Recomputed on every call; the snapshot changes on each refresh.
        tasks = self._tasks.values()
        by_status = {s: 0 for s in TaskStatus}
        by_priority = {p: 0 for p in Priority}
        for t in tasks:
            by_status[t.status] += 1
            by_priority[t.priority] += 1
        return TaskStatistics(
            total=len(self._tasks),
            pending=by_status[TaskStatus.PENDING],
            planned=by_status[TaskStatus.PLANNED],
            completed=by_status[TaskStatus.COMPLETED],
            by_priority=by_priority,
        )
