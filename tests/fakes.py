# tests/fakes.py

from __future__ import annotations

from dataclasses import replace

from agenda_client.core.errors import ServiceUnavailableError, TaskNotFoundError
from agenda_client.planning.plan_models import PlanRequest, PlanResult
from agenda_client.tasks.task_models import Priority, Task, TaskDraft, TaskStatus


class FakeTaskGateway:
    """
    In-memory task service used by unit tests.

    Like the real backend it stores whatever it is given (no dependency
    checks), and it records every mutating call for assertions.
    """

    def __init__(self, tasks: list[Task] | None = None, *, user_id: int = 1) -> None:
        self.tasks: dict[int, Task] = {t.id: t for t in tasks or []}
        self.user_id = user_id
        self.calls: list[tuple] = []
        self.fail_delete_ids: set[int] = set()
        self.fail_patch_ids: set[int] = set()
        self.list_calls = 0

    def _next_id(self) -> int:
        return max(self.tasks, default=0) + 1

    def _from_draft(self, task_id: int, draft: TaskDraft) -> Task:
        return Task(
            id=task_id,
            name=draft.name,
            date=draft.date,
            duration_minutes=draft.duration_minutes,
            priority=draft.priority,
            status=draft.status,
            desired_start_time=draft.desired_start_time,
            depends_on_id=draft.depends_on_id,
            allowed_weather=draft.allowed_weather,
            note=draft.note,
            user_id=self.user_id,
        )

    async def list_tasks(self) -> list[Task]:
        self.list_calls += 1
        return list(self.tasks.values())

    async def get_task(self, task_id: int) -> Task:
        if task_id not in self.tasks:
            raise TaskNotFoundError(task_id)
        return self.tasks[task_id]

    async def create_task(self, draft: TaskDraft) -> Task:
        task = self._from_draft(self._next_id(), draft)
        self.tasks[task.id] = task
        self.calls.append(("create", task.id, draft))
        return task

    async def update_task(self, task_id: int, draft: TaskDraft) -> Task:
        if task_id not in self.tasks:
            raise TaskNotFoundError(task_id)
        task = self._from_draft(task_id, draft)
        self.tasks[task_id] = task
        self.calls.append(("update", task_id, draft))
        return task

    async def delete_task(self, task_id: int) -> None:
        if task_id in self.fail_delete_ids:
            raise ServiceUnavailableError("Could not connect to the task service")
        if task_id not in self.tasks:
            raise TaskNotFoundError(task_id)
        del self.tasks[task_id]
        self.calls.append(("delete", task_id))

    async def patch_status(self, task_id: int, status: TaskStatus) -> Task:
        if task_id in self.fail_patch_ids:
            raise ServiceUnavailableError("Could not connect to the task service")
        if task_id not in self.tasks:
            raise TaskNotFoundError(task_id)
        task = replace(self.tasks[task_id], status=status)
        self.tasks[task_id] = task
        self.calls.append(("patch", task_id, status))
        return task

    async def list_by_date(self, date: str, *, user_id: int | None = None) -> list[Task]:
        return [t for t in self.tasks.values() if t.date == date]

    async def list_by_status(self, status: TaskStatus) -> list[Task]:
        return [t for t in self.tasks.values() if t.status == status]

    async def list_by_priority(self, priority: Priority) -> list[Task]:
        return [t for t in self.tasks.values() if t.priority == priority]


class FakePlannerGateway:
    """Returns a preset PlanResult and records requests."""

    def __init__(self, result: PlanResult | None = None) -> None:
        self.result = result or PlanResult(feasible=True, available_minutes=0, used_minutes=0, remaining_minutes=0)
        self.requests: list[tuple[str, PlanRequest]] = []

    async def generate_plan(self, request: PlanRequest) -> PlanResult:
        self.requests.append(("plan", request))
        return self.result

    async def replan(self, request: PlanRequest) -> PlanResult:
        self.requests.append(("replan", request))
        return self.result
