# src/agenda_client/planning/plan_export.py

from __future__ import annotations

from .plan_models import UNKNOWN_WEATHER, PlanRequest, PlanResult

_RULE = "=" * 50


def plan_status_line(result: PlanResult) -> str:
    if not result.scheduled_slots:
        return "No tasks to plan"
    if result.is_partial:
        return "Partial plan"
    return "Plan generated successfully"


def render_plan_text(request: PlanRequest, result: PlanResult) -> str:
    """Printable plan: header, numbered scheduled slots, then unscheduled tasks."""
    weather = request.weather.name.lower() if request.weather else UNKNOWN_WEATHER
    lines = [
        f"DAY PLAN - {request.date}",
        f"Weather: {weather}",
        f"Available time: {result.available_minutes} minutes",
        f"Used time: {result.used_minutes} minutes",
        f"Free time: {result.remaining_minutes} minutes",
        "",
        "SCHEDULED TASKS:",
        _RULE,
        "",
    ]

    for i, slot in enumerate(result.scheduled_slots, start=1):
        lines.append(f"{i}. {slot.name}")
        lines.append(f"   Time: {slot.start} - {slot.end} ({slot.duration_minutes} min)")
        lines.append("")

    if result.unscheduled:
        lines += ["", "UNSCHEDULED TASKS:", _RULE, ""]
        for i, task in enumerate(result.unscheduled, start=1):
            lines.append(f"{i}. {task.name} ({task.duration_minutes} min)")

    if not result.feasible and result.suggestions:
        lines += ["", "SUGGESTIONS:", result.suggestions]

    return "\n".join(lines).rstrip() + "\n"
