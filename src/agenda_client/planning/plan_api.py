# src/agenda_client/planning/plan_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.errors import AgendaError
from ..core.state import AppState
from ..tasks.task_models import TaskStatus
from .plan_models import PlanRequest, PlanResult

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PlanOutcome:
    result: PlanResult
    planned_ids: list[int] = field(default_factory=list)
    skipped_ids: list[int] = field(default_factory=list)
    # task_id -> error message, for status patches that failed
    failures: dict[int, str] = field(default_factory=dict)


async def apply_planned_status(state: AppState, result: PlanResult) -> PlanOutcome:
    """
    Mark every scheduled task PLANNED on the server, then refresh the store.

    Tasks already COMPLETED are skipped (COMPLETED is terminal). A failed patch
    does not stop the others; failures are returned to the caller.
    """
    planned: list[int] = []
    skipped: list[int] = []
    failures: dict[int, str] = {}

    for slot in result.scheduled_slots:
        known = state.task_store.find_by_id(slot.task_id)
        if known is not None and known.status == TaskStatus.COMPLETED:
            skipped.append(slot.task_id)
            continue
        try:
            await state.tasks.patch_status(slot.task_id, TaskStatus.PLANNED)
        except AgendaError as exc:
            logger.warning("Could not mark task_id=%s planned: %s", slot.task_id, exc)
            failures[slot.task_id] = str(exc)
            continue
        planned.append(slot.task_id)

    if result.scheduled_slots:
        await state.task_store.refresh()

    logger.info("Plan applied: planned=%s skipped=%s failed=%s", len(planned), len(skipped), len(failures))
    return PlanOutcome(result=result, planned_ids=planned, skipped_ids=skipped, failures=failures)


async def generate_plan(state: AppState, request: PlanRequest, *, replan: bool = False) -> PlanOutcome:
    """
    Ask the planning service for a timetable and apply it.

    replan=True plans again with only the tasks still open, e.g. after some
    were completed during the day.
    """
    if replan:
        result = await state.planner.replan(request)
    else:
        result = await state.planner.generate_plan(request)

    state.last_plan = result
    state.last_plan_request = request

    logger.info(
        "Plan for %s: feasible=%s scheduled=%s unscheduled=%s",
        request.date,
        result.feasible,
        len(result.scheduled_slots),
        len(result.unscheduled),
    )
    return await apply_planned_status(state, result)
