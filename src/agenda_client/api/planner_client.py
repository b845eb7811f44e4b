# src/agenda_client/api/planner_client.py

from __future__ import annotations

import logging

import httpx

from ..core.errors import ServiceError
from ..planning.plan_models import PlanRequest, PlanResult
from .http import json_body, raise_for_status, send

logger = logging.getLogger(__name__)

SERVICE = "planning service"


class HttpPlannerGateway:
    """REST client for the planning service (/agenda)."""

    def __init__(self, client: httpx.AsyncClient, *, user_id: int) -> None:
        self._client = client
        self._user_id = int(user_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, url: str, request: PlanRequest, *, what: str) -> PlanResult:
        payload = request.to_wire(self._user_id)
        logger.info("Planning %s date=%s weather=%s minutes=%s", what, request.date, payload["climaDia"], request.available_minutes)
        response = await send(self._client, "POST", url, service=SERVICE, what=what, json=payload)
        raise_for_status(response, service=SERVICE, what=what)
        data = json_body(response, service=SERVICE, what=what)
        if not isinstance(data, dict):
            raise ServiceError(f"{SERVICE} returned an invalid response ({what})", status_code=response.status_code)
        return PlanResult.from_wire(data)

    async def generate_plan(self, request: PlanRequest) -> PlanResult:
        return await self._post("/agenda/planificar", request, what="generate plan")

    async def replan(self, request: PlanRequest) -> PlanResult:
        """Plan again with only the tasks still open (after some were completed)."""
        return await self._post("/agenda/replanificar", request, what="replan")
