# src/agenda_client/planning/plan_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_models import Priority, Weather, parse_clock

# Day weather words expected by the planner (lower case, unlike task records).
UNKNOWN_WEATHER = "desconocido"


@dataclass(slots=True, frozen=True)
class PlanRequest:
    date: str
    weather: Weather | None
    available_minutes: int
    start_time: str

    def __post_init__(self) -> None:
        if not self.date:
            raise ValueError("date is required")
        if int(self.available_minutes) <= 0:
            raise ValueError("available_minutes must be positive")
        parse_clock(self.start_time)

    def to_wire(self, user_id: int) -> dict[str, Any]:
        return {
            "usuarioId": user_id,
            "fecha": self.date,
            "climaDia": self.weather.value.lower() if self.weather else UNKNOWN_WEATHER,
            "minutosDisponibles": int(self.available_minutes),
            "horaInicio": self.start_time,
        }


@dataclass(slots=True, frozen=True)
class ScheduledSlot:
    task_id: int
    name: str
    start: str
    end: str

    @property
    def duration_minutes(self) -> int:
        return parse_clock(self.end) - parse_clock(self.start)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ScheduledSlot:
        return cls(
            task_id=int(data["id"]),
            name=str(data.get("nombre") or ""),
            start=str(data.get("inicio") or "")[:5],
            end=str(data.get("fin") or "")[:5],
        )


@dataclass(slots=True, frozen=True)
class UnscheduledTask:
    name: str
    duration_minutes: int
    priority: Priority
    weathers: list[str] = field(default_factory=list)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> UnscheduledTask:
        return cls(
            name=str(data.get("nombre") or ""),
            duration_minutes=int(data.get("dur") or 0),
            priority=_priority_from_any(data.get("prioridad")),
            weathers=[str(w) for w in (data.get("climas") or [])],
        )


def _priority_from_any(raw: Any) -> Priority:
    # The planner reports priority either as the enum word or as 1..3.
    if isinstance(raw, int):
        return next((p for p in Priority if p.rank == raw), Priority.MEDIUM)
    return Priority.from_wire(raw)


@dataclass(slots=True, frozen=True)
class PlanResult:
    feasible: bool
    available_minutes: int
    used_minutes: int
    remaining_minutes: int
    scheduled_slots: list[ScheduledSlot] = field(default_factory=list)
    unscheduled: list[UnscheduledTask] = field(default_factory=list)
    suggestions: str | None = None

    @property
    def is_partial(self) -> bool:
        return bool(self.scheduled_slots) and not self.feasible

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> PlanResult:
        return cls(
            feasible=bool(data.get("posible")),
            available_minutes=int(data.get("minutosDisponibles") or 0),
            used_minutes=int(data.get("minutosUsados") or 0),
            remaining_minutes=int(data.get("minutosSobrantes") or 0),
            scheduled_slots=[ScheduledSlot.from_wire(s) for s in data.get("tareasPlan") or []],
            unscheduled=[UnscheduledTask.from_wire(u) for u in data.get("noProgramadas") or []],
            suggestions=data.get("sugerencias") or None,
        )
