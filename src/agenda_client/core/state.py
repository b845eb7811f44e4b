# src/agenda_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..planning.plan_models import PlanRequest, PlanResult
from ..tasks.task_store import TaskFilter, TaskStore
from .ports import PlannerGateway, TaskGateway


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    tasks: TaskGateway
    planner: PlannerGateway
    task_store: TaskStore

    active_filter: TaskFilter = field(default_factory=TaskFilter)

    # Last plan shown to the user (for /export and /replan defaults).
    last_plan: PlanResult | None = None
    last_plan_request: PlanRequest | None = None

    @property
    def user_id(self) -> int:
        return int(getattr(self.settings, "user_id", 1))
