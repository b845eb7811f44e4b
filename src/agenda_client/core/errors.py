# src/agenda_client/core/errors.py

"""
Error taxonomy.

Three families the console treats differently:
- TaskValidationError: rejected locally, before any request; the user must fix input.
- TaskNotFoundError: the target task is not known (store or server).
- ServiceError: the task/planning service failed or is unreachable; the user may retry.
"""

from __future__ import annotations

from typing import Any


class AgendaError(Exception):
    """Base class for all errors raised by agenda_client."""


class TaskValidationError(AgendaError):
    title = "Invalid change"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CircularDependencyError(TaskValidationError):
    title = "Circular dependency detected"

    def __init__(self, task_id: int, depends_on_id: int) -> None:
        super().__init__(
            "A circular dependency cannot be created: the task would eventually depend on itself. "
            "Check the dependency chain."
        )
        self.task_id = task_id
        self.depends_on_id = depends_on_id


class TimeWindowConflictError(TaskValidationError):
    title = "Invalid start time"

    def __init__(self, prerequisite: Any, prerequisite_end: str) -> None:
        super().__init__(
            "A dependent task must start after its prerequisite ends.\n"
            f'Prerequisite "{prerequisite.name}": starts {prerequisite.desired_start_time}, '
            f"ends {prerequisite_end}.\n"
            f"This task must start after {prerequisite_end}."
        )
        self.prerequisite = prerequisite
        self.prerequisite_end = prerequisite_end


class CompletionBlockedError(TaskValidationError):
    title = "Cannot complete"

    def __init__(self, task_id: int, prerequisite_name: str) -> None:
        super().__init__(
            f'This task depends on "{prerequisite_name}", which is not completed yet. '
            "Complete the prerequisite first."
        )
        self.task_id = task_id
        self.prerequisite_name = prerequisite_name


class UnknownPrerequisiteError(TaskValidationError):
    title = "Unknown prerequisite"

    def __init__(self, depends_on_id: int) -> None:
        super().__init__(f"Task #{depends_on_id} does not exist and cannot be used as a prerequisite.")
        self.depends_on_id = depends_on_id


class InvalidTransitionError(TaskValidationError):
    title = "Invalid status change"

    def __init__(self, task_id: int, current: Any, requested: Any) -> None:
        super().__init__(f"Task #{task_id} is {current} and cannot be moved to {requested}.")
        self.task_id = task_id
        self.current = current
        self.requested = requested


class TaskNotFoundError(AgendaError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task #{task_id} not found")
        self.task_id = task_id


class ServiceError(AgendaError):
    """The task or planning service returned an error (status_code is None when unreachable)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServiceUnavailableError(ServiceError):
    """Connection refused, DNS failure, timeout: the request never got an answer."""
