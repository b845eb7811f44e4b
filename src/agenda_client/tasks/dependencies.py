# src/agenda_client/tasks/dependencies.py

from __future__ import annotations

"""
Dependency & consistency checks.

The task service stores dependsOnId as a plain column and validates nothing,
so every graph invariant is enforced here, against the TaskStore snapshot,
before a mutating request is sent:

- would_create_cycle:        no task may (transitively) depend on itself
- validate_dependent_window: a dependent starts strictly after its prerequisite ends
- cascade_closure:           deleting a task deletes everything depending on it
- can_complete:              a task is completed only after its prerequisite

All functions are pure with respect to the store: they only read it.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from .task_models import Task, TaskDraft, TaskStatus, format_clock, parse_clock
from .task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class WindowConflict:
    prerequisite: Task
    prerequisite_end: str
    reason: str


@dataclass(slots=True, frozen=True)
class CompletionBlock:
    prerequisite: Task

    @property
    def prerequisite_name(self) -> str:
        return self.prerequisite.name


def would_create_cycle(store: TaskStore, task_id: int | None, proposed_depends_on_id: int | None) -> bool:
    """
    Would making task_id depend on proposed_depends_on_id close a cycle?

    Walks the prerequisite chain upwards from proposed_depends_on_id. Reaching
    task_id means a cycle. A node seen twice means the chain already loops
    somewhere else; that loop is not caused by this edit, so we stop and
    report False instead of walking forever.
    """
    if proposed_depends_on_id is None or task_id is None:
        return False

    visited: set[int] = set()
    current: int | None = proposed_depends_on_id

    while current is not None:
        if current == task_id:
            return True
        if current in visited:
            logger.warning("Pre-existing dependency loop detected at task_id=%s", current)
            return False
        visited.add(current)

        node = store.find_by_id(current)
        current = node.depends_on_id if node is not None else None

    return False


def prerequisite_end_minutes(prerequisite: Task) -> int | None:
    if not prerequisite.desired_start_time:
        return None
    return parse_clock(prerequisite.desired_start_time) + int(prerequisite.duration_minutes)


def validate_dependent_window(
    dependent: Task | TaskDraft,
    prerequisite: Task | None,
) -> WindowConflict | None:
    """
    The dependent must start strictly after prerequisite start + duration.

    Only checked when both sides have a desired start time. Starting exactly
    when the prerequisite ends is a conflict. End times past midnight are not
    wrapped (a 23:30 + 60 min prerequisite ends at "24:30").
    """
    dependent_start_time = dependent.desired_start_time
    if prerequisite is None or not dependent_start_time:
        return None

    end = prerequisite_end_minutes(prerequisite)
    if end is None:
        return None

    if parse_clock(dependent_start_time) <= end:
        end_s = format_clock(end)
        return WindowConflict(
            prerequisite=prerequisite,
            prerequisite_end=end_s,
            reason=f'must start after "{prerequisite.name}" ends at {end_s}',
        )
    return None


def cascade_closure(store: TaskStore, task_id: int) -> list[Task]:
    """
    Every task that (transitively) depends on task_id, excluding task_id.

    Ordered leaves first: each task appears before its own prerequisite, so
    deleting in this order (then task_id) never leaves a dangling reference
    even if some deletes succeed and a later one fails.
    """
    ordered: list[Task] = []
    seen: set[int] = {task_id}

    # Explicit stack: chains can be as long as the whole task list.
    stack: list[tuple[Task | None, Iterator[Task]]] = [(None, iter(store.find_dependents(task_id)))]
    while stack:
        parent, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            if parent is not None:
                ordered.append(parent)
            continue
        if child.id in seen:
            continue
        seen.add(child.id)
        stack.append((child, iter(store.find_dependents(child.id))))

    return ordered


def can_complete(store: TaskStore, task: Task) -> CompletionBlock | None:
    """
    None when task may move to COMPLETED.

    A prerequisite missing from the store (deleted, never existed) does not block.
    """
    if task.depends_on_id is None:
        return None
    prerequisite = store.find_by_id(task.depends_on_id)
    if prerequisite is not None and prerequisite.status != TaskStatus.COMPLETED:
        return CompletionBlock(prerequisite=prerequisite)
    return None
