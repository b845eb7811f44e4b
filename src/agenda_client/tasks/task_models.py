# src/agenda_client/tasks/task_models.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    """
    Task lifecycle status (wire values are the backend's).

    PENDING -> PLANNED when a generated plan schedules the task.
    PENDING / PLANNED -> COMPLETED by the user, once the prerequisite is completed.
    COMPLETED is terminal.
    """

    PENDING = "PENDIENTE"
    PLANNED = "PLANIFICADA"
    COMPLETED = "COMPLETADA"

    @classmethod
    def from_wire(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


class Priority(StrEnum):
    LOW = "BAJA"
    MEDIUM = "MEDIA"
    HIGH = "ALTA"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_wire(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class Weather(StrEnum):
    SUNNY = "SOLEADO"
    CLOUDY = "NUBLADO"
    RAINY = "LLUVIOSO"
    WINDY = "VENTOSO"

    @classmethod
    def from_wire(cls, raw: str | None) -> Weather | None:
        if not raw:
            return None
        try:
            return cls(raw.upper())
        except ValueError:
            return None


def parse_clock(value: str) -> int:
    """'HH:MM' -> minutes since midnight."""
    hh, _, mm = value.strip().partition(":")
    if not hh or not mm:
        raise ValueError(f"invalid clock time: {value!r}")
    hours, minutes = int(hh), int(mm)
    if hours < 0 or not 0 <= minutes < 60:
        raise ValueError(f"invalid clock time: {value!r}")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    """Minutes since midnight -> 'HH:MM'. Values past 23:59 are not wrapped."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    name: str
    date: str
    duration_minutes: int
    priority: Priority
    status: TaskStatus

    desired_start_time: str | None = None
    depends_on_id: int | None = None
    allowed_weather: Weather | None = None
    note: str | None = None
    user_id: int | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Task:
        depends_on = data.get("dependeDeId")
        user_id = data.get("usuarioId")
        return cls(
            id=int(data["id"]),
            name=str(data.get("nombre") or ""),
            date=str(data.get("fecha") or ""),
            duration_minutes=int(data.get("duracionMinutos") or 0),
            priority=Priority.from_wire(data.get("prioridad")),
            status=TaskStatus.from_wire(data.get("estado")),
            desired_start_time=_clock_or_none(data.get("horaDeseada")),
            depends_on_id=int(depends_on) if depends_on not in (None, "") else None,
            allowed_weather=Weather.from_wire(data.get("climaPermitido")),
            note=data.get("nota") or None,
            user_id=int(user_id) if user_id not in (None, "") else None,
        )


def _clock_or_none(raw: Any) -> str | None:
    if not raw:
        return None
    # Some backends serialize LocalTime as HH:MM:SS.
    value = str(raw).strip()[:5]
    try:
        parse_clock(value)
    except ValueError:
        logger.warning("Ignoring malformed horaDeseada from server: %r", raw)
        return None
    return value


@dataclass(slots=True, frozen=True)
class TaskDraft:
    """
    User input for create / full-replacement edit (no id).

    status is only honoured on edits; creation always stores PENDING.
    """

    name: str
    date: str
    duration_minutes: int
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    desired_start_time: str | None = None
    depends_on_id: int | None = None
    allowed_weather: Weather | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        if not self.date:
            raise ValueError("date is required")
        if int(self.duration_minutes) <= 0:
            raise ValueError("duration_minutes must be positive")
        if self.desired_start_time is not None:
            parse_clock(self.desired_start_time)

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(
            name=task.name,
            date=task.date,
            duration_minutes=task.duration_minutes,
            priority=task.priority,
            status=task.status,
            desired_start_time=task.desired_start_time,
            depends_on_id=task.depends_on_id,
            allowed_weather=task.allowed_weather,
            note=task.note,
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "nombre": self.name.strip(),
            "fecha": self.date,
            "duracionMinutos": int(self.duration_minutes),
            "horaDeseada": self.desired_start_time,
            "prioridad": self.priority.value,
            "estado": self.status.value,
            "dependeDeId": self.depends_on_id,
            "climaPermitido": self.allowed_weather.value if self.allowed_weather else None,
            "nota": self.note or None,
        }
