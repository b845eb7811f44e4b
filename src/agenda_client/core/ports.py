# src/agenda_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The store and the task/planning operations depend on Protocols instead of the
concrete httpx clients. This keeps the backend swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..planning.plan_models import PlanRequest, PlanResult
    from ..tasks.task_models import Priority, Task, TaskDraft, TaskStatus


class TaskGateway(Protocol):
    """Task persistence service: flat CRUD, no relational validation server-side."""

    async def list_tasks(self) -> list[Task]: ...
    async def get_task(self, task_id: int) -> Task: ...
    async def create_task(self, draft: TaskDraft) -> Task: ...
    async def update_task(self, task_id: int, draft: TaskDraft) -> Task: ...
    async def delete_task(self, task_id: int) -> None: ...
    async def patch_status(self, task_id: int, status: TaskStatus) -> Task: ...

    # Server-side queries
    async def list_by_date(self, date: str, *, user_id: int | None = None) -> list[Task]: ...
    async def list_by_status(self, status: TaskStatus) -> list[Task]: ...
    async def list_by_priority(self, priority: Priority) -> list[Task]: ...


class PlannerGateway(Protocol):
    """Planning service: returns a timetable for one day. The algorithm is opaque."""

    async def generate_plan(self, request: PlanRequest) -> PlanResult: ...
    async def replan(self, request: PlanRequest) -> PlanResult: ...
