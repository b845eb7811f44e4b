# src/agenda_client/api/task_client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import ServiceError, TaskNotFoundError
from ..tasks.task_models import Priority, Task, TaskDraft, TaskStatus
from .http import json_body, raise_for_status, send

logger = logging.getLogger(__name__)

SERVICE = "task service"


class HttpTaskGateway:
    """
    REST client for the task persistence service (/tareas).

    The service only offers flat CRUD; it does not check dependencies.
    """

    def __init__(self, client: httpx.AsyncClient, *, user_id: int) -> None:
        self._client = client
        self._user_id = int(user_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, *, what: str, **kwargs: Any) -> httpx.Response:
        return await send(self._client, method, url, service=SERVICE, what=what, **kwargs)

    def _tasks_from(self, response: httpx.Response, *, what: str) -> list[Task]:
        raise_for_status(response, service=SERVICE, what=what)
        data = json_body(response, service=SERVICE, what=what)
        if not isinstance(data, list):
            raise ServiceError(f"{SERVICE} returned an invalid response ({what})", status_code=response.status_code)
        return [Task.from_wire(item) for item in data]

    def _task_from(self, response: httpx.Response, *, what: str, task_id: int | None = None) -> Task:
        if response.status_code == 404 and task_id is not None:
            raise TaskNotFoundError(task_id)
        raise_for_status(response, service=SERVICE, what=what)
        data = json_body(response, service=SERVICE, what=what)
        if not isinstance(data, dict):
            raise ServiceError(f"{SERVICE} returned an invalid response ({what})", status_code=response.status_code)
        return Task.from_wire(data)

    # ---- CRUD ----

    async def list_tasks(self) -> list[Task]:
        response = await self._request("GET", "/tareas", what="list tasks")
        return self._tasks_from(response, what="list tasks")

    async def get_task(self, task_id: int) -> Task:
        response = await self._request("GET", f"/tareas/{int(task_id)}", what="get task")
        return self._task_from(response, what="get task", task_id=task_id)

    async def create_task(self, draft: TaskDraft) -> Task:
        payload = draft.to_wire()
        payload["usuarioId"] = self._user_id
        response = await self._request("POST", "/tareas", what="create task", json=payload)
        task = self._task_from(response, what="create task")
        logger.info("Task created id=%s name=%r", task.id, task.name)
        return task

    async def update_task(self, task_id: int, draft: TaskDraft) -> Task:
        payload = draft.to_wire()
        payload["usuarioId"] = self._user_id
        response = await self._request("PUT", f"/tareas/{int(task_id)}", what="update task", json=payload)
        task = self._task_from(response, what="update task", task_id=task_id)
        logger.info("Task updated id=%s", task.id)
        return task

    async def delete_task(self, task_id: int) -> None:
        response = await self._request("DELETE", f"/tareas/{int(task_id)}", what="delete task")
        if response.status_code == 404:
            raise TaskNotFoundError(task_id)
        raise_for_status(response, service=SERVICE, what="delete task")
        logger.info("Task deleted id=%s", task_id)

    async def patch_status(self, task_id: int, status: TaskStatus) -> Task:
        response = await self._request(
            "PATCH",
            f"/tareas/{int(task_id)}/estado",
            what="change task status",
            params={"nuevo": status.value},
        )
        task = self._task_from(response, what="change task status", task_id=task_id)
        logger.info("Task %s -> %s", task_id, status.name)
        return task

    # ---- server-side queries ----

    async def list_by_date(self, date: str, *, user_id: int | None = None) -> list[Task]:
        params = {"usuarioId": self._user_id if user_id is None else int(user_id), "fecha": date}
        response = await self._request("GET", "/tareas/por-fecha", what="list tasks by date", params=params)
        return self._tasks_from(response, what="list tasks by date")

    async def list_by_status(self, status: TaskStatus) -> list[Task]:
        response = await self._request(
            "GET", "/tareas/por-estado", what="list tasks by status", params={"estado": status.value}
        )
        return self._tasks_from(response, what="list tasks by status")

    async def list_by_priority(self, priority: Priority) -> list[Task]:
        response = await self._request(
            "GET", "/tareas/por-prioridad", what="list tasks by priority", params={"prioridad": priority.value}
        )
        return self._tasks_from(response, what="list tasks by priority")
