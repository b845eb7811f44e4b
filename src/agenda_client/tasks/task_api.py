# src/agenda_client/tasks/task_api.py

"""
Mutating task operations.

Every operation follows the same steps:
  1. look up what it needs in state.task_store (no network),
  2. run the dependency checks; reject with a TaskValidationError,
  3. send the request(s) to the task service,
  4. refresh the whole store from the service.

Transport failures (ServiceError) propagate unchanged so the caller can tell
"fix your input" apart from "try again".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from ..core.errors import (
    AgendaError,
    CircularDependencyError,
    CompletionBlockedError,
    InvalidTransitionError,
    ServiceError,
    TaskNotFoundError,
    TimeWindowConflictError,
    UnknownPrerequisiteError,
)
from ..core.state import AppState
from .dependencies import can_complete, cascade_closure, validate_dependent_window, would_create_cycle
from .task_models import Task, TaskDraft, TaskStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DeletionOutcome:
    """
    Result of delete_task.

    requires_confirmation=True: nothing was deleted; `closure` lists the
    dependents that would be removed too. Call again with confirmed=True.
    """

    task: Task
    closure: list[Task] = field(default_factory=list)
    requires_confirmation: bool = False
    deleted_ids: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.closure) + 1


async def refresh_tasks(state: AppState) -> list[Task]:
    return await state.task_store.refresh()


async def _ensure_loaded(state: AppState) -> None:
    if not state.task_store.loaded:
        await state.task_store.refresh()


def _check_dependency(state: AppState, task_id: int | None, draft: TaskDraft) -> None:
    """Prerequisite exists, no cycle, and the start times are ordered."""
    if draft.depends_on_id is None:
        return

    store = state.task_store
    prerequisite = store.find_by_id(draft.depends_on_id)
    if prerequisite is None:
        logger.info("Rejected: unknown prerequisite id=%s", draft.depends_on_id)
        raise UnknownPrerequisiteError(draft.depends_on_id)

    if would_create_cycle(store, task_id, draft.depends_on_id):
        logger.info("Rejected: cycle task_id=%s depends_on=%s", task_id, draft.depends_on_id)
        raise CircularDependencyError(task_id, draft.depends_on_id)

    conflict = validate_dependent_window(draft, prerequisite)
    if conflict is not None:
        logger.info(
            "Rejected: start %s is not after prerequisite id=%s end %s",
            draft.desired_start_time,
            prerequisite.id,
            conflict.prerequisite_end,
        )
        raise TimeWindowConflictError(conflict.prerequisite, conflict.prerequisite_end)


def _check_completion(state: AppState, task: Task) -> None:
    block = can_complete(state.task_store, task)
    if block is not None:
        logger.info("Rejected: completion of task_id=%s blocked by id=%s", task.id, block.prerequisite.id)
        raise CompletionBlockedError(task.id, block.prerequisite_name)


async def create_task(state: AppState, draft: TaskDraft) -> Task:
    """Create a task. The stored status is always PENDING, whatever the draft says."""
    await _ensure_loaded(state)

    if draft.status != TaskStatus.PENDING:
        logger.debug("Ignoring client-supplied status %s on create", draft.status.name)
        draft = replace(draft, status=TaskStatus.PENDING)

    _check_dependency(state, None, draft)

    created = await state.tasks.create_task(draft)
    await state.task_store.refresh()
    return created


async def update_task(state: AppState, task_id: int, draft: TaskDraft) -> Task:
    """Full replacement of an existing task."""
    await _ensure_loaded(state)

    current = state.task_store.find_by_id(task_id)
    if current is None:
        raise TaskNotFoundError(task_id)

    # By hand a task may only keep its status or move to COMPLETED.
    # PLANNED is set by planning; nothing leaves COMPLETED.
    if draft.status not in (current.status, TaskStatus.COMPLETED):
        raise InvalidTransitionError(task_id, current.status.name, draft.status.name)

    _check_dependency(state, task_id, draft)

    if draft.status == TaskStatus.COMPLETED:
        # Also for tasks already COMPLETED: the edit may point them at a new prerequisite.
        _check_completion(state, replace(current, depends_on_id=draft.depends_on_id))

    updated = await state.tasks.update_task(task_id, draft)
    await state.task_store.refresh()
    return updated


async def delete_task(state: AppState, task_id: int, *, confirmed: bool = False) -> DeletionOutcome:
    """
    Delete a task together with everything that depends on it.

    Dependents are deleted leaves-first, the task itself last. Deletes are
    independent requests: if one fails, the earlier ones stay deleted, the
    store is refreshed to show that, and the error is raised.
    """
    await _ensure_loaded(state)

    task = state.task_store.find_by_id(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)

    closure = cascade_closure(state.task_store, task_id)
    if closure and not confirmed:
        return DeletionOutcome(task=task, closure=closure, requires_confirmation=True)

    deleted: list[int] = []
    try:
        for victim in [*closure, task]:
            await state.tasks.delete_task(victim.id)
            deleted.append(victim.id)
    except AgendaError:
        logger.warning(
            "Cascade delete of task_id=%s stopped after %s of %s", task_id, len(deleted), len(closure) + 1
        )
        try:
            await state.task_store.refresh()
        except ServiceError:
            logger.warning("Refresh after failed delete failed too", exc_info=True)
        raise

    await state.task_store.refresh()
    logger.info("Deleted task_id=%s with %s dependent(s)", task_id, len(closure))
    return DeletionOutcome(task=task, closure=closure, deleted_ids=deleted)


async def complete_task(state: AppState, task_id: int) -> Task:
    await _ensure_loaded(state)

    task = state.task_store.find_by_id(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    if task.status == TaskStatus.COMPLETED:
        return task

    _check_completion(state, task)

    updated = await state.tasks.patch_status(task_id, TaskStatus.COMPLETED)
    await state.task_store.refresh()
    return updated
