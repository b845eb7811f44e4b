# tests/test_task_api.py

from __future__ import annotations

import pytest

from agenda_client.core.errors import (
    CircularDependencyError,
    CompletionBlockedError,
    InvalidTransitionError,
    ServiceUnavailableError,
    TaskNotFoundError,
    TimeWindowConflictError,
    UnknownPrerequisiteError,
)
from agenda_client.tasks.task_api import complete_task, create_task, delete_task, update_task
from agenda_client.tasks.task_models import TaskDraft, TaskStatus

from .conftest import make_task, seed


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_status(state, gateway) -> None:
    draft = TaskDraft(name="Water plants", date="2024-11-07", duration_minutes=15, status=TaskStatus.COMPLETED)

    created = await create_task(state, draft)

    assert created.status == TaskStatus.PENDING
    assert gateway.tasks[created.id].status == TaskStatus.PENDING
    assert state.task_store.find_by_id(created.id) is not None


@pytest.mark.asyncio
async def test_create_loads_store_before_validating(state, gateway) -> None:
    gateway.tasks = {1: make_task(1, start="09:00", duration=30)}
    draft = TaskDraft(name="After", date="2024-11-07", duration_minutes=10, desired_start_time="09:15", depends_on_id=1)

    with pytest.raises(TimeWindowConflictError) as exc_info:
        await create_task(state, draft)

    assert exc_info.value.prerequisite_end == "09:30"
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_create_with_unknown_prerequisite_is_rejected(state, gateway) -> None:
    seed(state, gateway, [make_task(1)])
    draft = TaskDraft(name="x", date="2024-11-07", duration_minutes=10, depends_on_id=7)

    with pytest.raises(UnknownPrerequisiteError):
        await create_task(state, draft)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_create_after_prerequisite_end_succeeds(state, gateway) -> None:
    seed(state, gateway, [make_task(1, start="09:00", duration=30)])
    draft = TaskDraft(name="x", date="2024-11-07", duration_minutes=10, desired_start_time="09:31", depends_on_id=1)

    created = await create_task(state, draft)

    assert created.depends_on_id == 1
    assert [t.id for t in state.task_store.find_dependents(1)] == [created.id]


@pytest.mark.asyncio
async def test_update_rejects_cycle(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2, depends_on=1), make_task(3, depends_on=2)])
    draft = TaskDraft.from_task(make_task(1, depends_on=3))

    with pytest.raises(CircularDependencyError):
        await update_task(state, 1, draft)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_update_missing_task_is_not_found(state, gateway) -> None:
    seed(state, gateway, [make_task(1)])
    with pytest.raises(TaskNotFoundError):
        await update_task(state, 5, TaskDraft.from_task(make_task(5)))


@pytest.mark.asyncio
async def test_update_cannot_reopen_completed_task(state, gateway) -> None:
    seed(state, gateway, [make_task(1, status=TaskStatus.COMPLETED)])
    draft = TaskDraft.from_task(make_task(1, status=TaskStatus.PENDING))

    with pytest.raises(InvalidTransitionError):
        await update_task(state, 1, draft)


@pytest.mark.asyncio
async def test_update_to_completed_goes_through_guard(state, gateway) -> None:
    seed(state, gateway, [make_task(1, name="First"), make_task(2, depends_on=1)])
    draft = TaskDraft.from_task(make_task(2, depends_on=1, status=TaskStatus.COMPLETED))

    with pytest.raises(CompletionBlockedError):
        await update_task(state, 2, draft)


@pytest.mark.asyncio
async def test_update_refreshes_store(state, gateway) -> None:
    seed(state, gateway, [make_task(1, name="old")])
    updated = await update_task(state, 1, TaskDraft.from_task(make_task(1, name="new")))
    assert updated.name == "new"
    assert state.task_store.find_by_id(1).name == "new"


@pytest.mark.asyncio
async def test_delete_with_dependents_requires_confirmation(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2, depends_on=1), make_task(3, depends_on=2)])

    outcome = await delete_task(state, 1)

    assert outcome.requires_confirmation
    assert [t.id for t in outcome.closure] == [3, 2]
    assert outcome.total == 3
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_confirmed_delete_removes_dependents_before_root(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2, depends_on=1), make_task(3, depends_on=2), make_task(4)])

    outcome = await delete_task(state, 1, confirmed=True)

    assert not outcome.requires_confirmation
    assert gateway.calls == [("delete", 3), ("delete", 2), ("delete", 1)]
    assert outcome.deleted_ids == [3, 2, 1]
    assert [t.id for t in state.task_store.all()] == [4]


@pytest.mark.asyncio
async def test_delete_without_dependents_needs_no_confirmation(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2)])
    outcome = await delete_task(state, 2)
    assert outcome.deleted_ids == [2]
    assert [t.id for t in state.task_store.all()] == [1]


@pytest.mark.asyncio
async def test_failed_cascade_keeps_partial_deletes_and_refreshes(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2, depends_on=1), make_task(3, depends_on=2)])
    gateway.fail_delete_ids = {2}

    with pytest.raises(ServiceUnavailableError):
        await delete_task(state, 1, confirmed=True)

    assert gateway.calls == [("delete", 3)]
    assert sorted(t.id for t in state.task_store.all()) == [1, 2]


@pytest.mark.asyncio
async def test_delete_unknown_task(state, gateway) -> None:
    seed(state, gateway, [make_task(1)])
    with pytest.raises(TaskNotFoundError):
        await delete_task(state, 2)


@pytest.mark.asyncio
async def test_complete_blocked_until_prerequisite_completed(state, gateway) -> None:
    seed(state, gateway, [make_task(1, name="Buy flour"), make_task(2, depends_on=1)])

    with pytest.raises(CompletionBlockedError) as exc_info:
        await complete_task(state, 2)
    assert exc_info.value.prerequisite_name == "Buy flour"

    await complete_task(state, 1)
    done = await complete_task(state, 2)

    assert done.status == TaskStatus.COMPLETED
    assert gateway.calls == [("patch", 1, TaskStatus.COMPLETED), ("patch", 2, TaskStatus.COMPLETED)]
    assert state.task_store.statistics().completed == 2


@pytest.mark.asyncio
async def test_complete_with_deleted_prerequisite_is_allowed(state, gateway) -> None:
    seed(state, gateway, [make_task(2, depends_on=1)])
    done = await complete_task(state, 2)
    assert done.status == TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_completed_task_cannot_be_pointed_at_open_prerequisite(state, gateway) -> None:
    seed(state, gateway, [make_task(1), make_task(2, status=TaskStatus.COMPLETED)])
    draft = TaskDraft.from_task(make_task(2, depends_on=1, status=TaskStatus.COMPLETED))

    with pytest.raises(CompletionBlockedError):
        await update_task(state, 2, draft)

    assert gateway.calls == []
    assert gateway.tasks[2].depends_on_id is None


@pytest.mark.asyncio
async def test_completed_task_can_depend_on_completed_prerequisite(state, gateway) -> None:
    seed(state, gateway, [make_task(1, status=TaskStatus.COMPLETED), make_task(2, status=TaskStatus.COMPLETED)])
    draft = TaskDraft.from_task(make_task(2, depends_on=1, status=TaskStatus.COMPLETED))

    updated = await update_task(state, 2, draft)

    assert updated.depends_on_id == 1


@pytest.mark.parametrize(
    ("current", "requested"),
    [
        (TaskStatus.PENDING, TaskStatus.PLANNED),
        (TaskStatus.PLANNED, TaskStatus.PENDING),
    ],
)
@pytest.mark.asyncio
async def test_manual_moves_between_pending_and_planned_are_rejected(state, gateway, current, requested) -> None:
    seed(state, gateway, [make_task(1, status=current)])

    with pytest.raises(InvalidTransitionError):
        await update_task(state, 1, TaskDraft.from_task(make_task(1, status=requested)))
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_planned_task_keeps_status_on_edit(state, gateway) -> None:
    seed(state, gateway, [make_task(1, name="old", status=TaskStatus.PLANNED)])

    updated = await update_task(state, 1, TaskDraft.from_task(make_task(1, name="new", status=TaskStatus.PLANNED)))

    assert updated.status == TaskStatus.PLANNED
