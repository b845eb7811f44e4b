# tests/test_plan_api.py

from __future__ import annotations

import pytest

from agenda_client.planning.plan_api import generate_plan
from agenda_client.planning.plan_export import plan_status_line, render_plan_text
from agenda_client.planning.plan_models import PlanRequest, PlanResult, ScheduledSlot, UnscheduledTask
from agenda_client.tasks.task_models import Priority, TaskStatus, Weather

from .conftest import make_task, seed

REQUEST = PlanRequest(date="2024-11-07", weather=Weather.CLOUDY, available_minutes=120, start_time="08:00")


def _result(*slots: ScheduledSlot, feasible: bool = True, unscheduled=()) -> PlanResult:
    used = sum(s.duration_minutes for s in slots)
    return PlanResult(
        feasible=feasible,
        available_minutes=120,
        used_minutes=used,
        remaining_minutes=120 - used,
        scheduled_slots=list(slots),
        unscheduled=list(unscheduled),
        suggestions=None if feasible else "Free up the afternoon",
    )


@pytest.mark.asyncio
async def test_scheduled_tasks_become_planned(state, gateway, planner) -> None:
    seed(state, gateway, [make_task(1), make_task(2), make_task(3)])
    planner.result = _result(
        ScheduledSlot(task_id=1, name="task 1", start="08:00", end="08:30"),
        ScheduledSlot(task_id=3, name="task 3", start="08:30", end="09:00"),
    )

    outcome = await generate_plan(state, REQUEST)

    assert outcome.planned_ids == [1, 3]
    assert outcome.failures == {}
    assert [t.status for t in state.task_store.all()] == [TaskStatus.PLANNED, TaskStatus.PENDING, TaskStatus.PLANNED]
    assert state.last_plan is planner.result
    assert planner.requests == [("plan", REQUEST)]


@pytest.mark.asyncio
async def test_completed_tasks_stay_completed(state, gateway, planner) -> None:
    seed(state, gateway, [make_task(1, status=TaskStatus.COMPLETED), make_task(2)])
    planner.result = _result(
        ScheduledSlot(task_id=1, name="task 1", start="08:00", end="08:30"),
        ScheduledSlot(task_id=2, name="task 2", start="08:30", end="09:00"),
    )

    outcome = await generate_plan(state, REQUEST, replan=True)

    assert outcome.skipped_ids == [1]
    assert outcome.planned_ids == [2]
    assert gateway.tasks[1].status == TaskStatus.COMPLETED
    assert planner.requests[0][0] == "replan"


@pytest.mark.asyncio
async def test_failed_status_patch_is_reported(state, gateway, planner) -> None:
    seed(state, gateway, [make_task(1), make_task(2)])
    gateway.fail_patch_ids = {1}
    planner.result = _result(
        ScheduledSlot(task_id=1, name="task 1", start="08:00", end="08:30"),
        ScheduledSlot(task_id=2, name="task 2", start="08:30", end="09:00"),
    )

    outcome = await generate_plan(state, REQUEST)

    assert list(outcome.failures) == [1]
    assert outcome.planned_ids == [2]
    assert state.task_store.find_by_id(2).status == TaskStatus.PLANNED


@pytest.mark.asyncio
async def test_empty_plan_does_not_touch_tasks(state, gateway, planner) -> None:
    seed(state, gateway, [make_task(1)])
    planner.result = _result()

    outcome = await generate_plan(state, REQUEST)

    assert outcome.planned_ids == []
    assert gateway.calls == []
    assert plan_status_line(outcome.result) == "No tasks to plan"


def test_render_plan_text() -> None:
    result = _result(
        ScheduledSlot(task_id=1, name="Run", start="08:00", end="08:45"),
        feasible=False,
        unscheduled=[UnscheduledTask(name="Paint fence", duration_minutes=240, priority=Priority.HIGH)],
    )

    text = render_plan_text(REQUEST, result)

    assert text.startswith("DAY PLAN - 2024-11-07\nWeather: cloudy\n")
    assert "Used time: 45 minutes" in text
    assert "1. Run\n   Time: 08:00 - 08:45 (45 min)" in text
    assert "UNSCHEDULED TASKS:" in text
    assert "1. Paint fence (240 min)" in text
    assert "Free up the afternoon" in text
    assert plan_status_line(result) == "Partial plan"
