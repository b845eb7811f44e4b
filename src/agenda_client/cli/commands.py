# src/agenda_client/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import date as date_cls
from pathlib import Path

from ..core.errors import TaskNotFoundError
from ..core.state import AppState
from ..planning.plan_api import PlanOutcome, generate_plan
from ..planning.plan_export import plan_status_line, render_plan_text
from ..planning.plan_models import PlanRequest
from ..tasks.task_api import complete_task, create_task, delete_task, refresh_tasks, update_task
from ..tasks.task_models import Priority, Task, TaskDraft, TaskStatus, Weather
from ..tasks.task_store import TaskFilter

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str] | str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Domain errors raised by handlers propagate to the caller.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        reply = handler(state, args, emit)
        if inspect.isawaitable(reply):
            reply = await reply
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----

_PRIORITY_WORDS = {
    "low": Priority.LOW, "baja": Priority.LOW,
    "medium": Priority.MEDIUM, "media": Priority.MEDIUM,
    "high": Priority.HIGH, "alta": Priority.HIGH,
}
_STATUS_WORDS = {
    "pending": TaskStatus.PENDING, "pendiente": TaskStatus.PENDING,
    "planned": TaskStatus.PLANNED, "planificada": TaskStatus.PLANNED,
    "completed": TaskStatus.COMPLETED, "done": TaskStatus.COMPLETED, "completada": TaskStatus.COMPLETED,
}
_WEATHER_WORDS = {
    "sunny": Weather.SUNNY, "soleado": Weather.SUNNY,
    "cloudy": Weather.CLOUDY, "nublado": Weather.CLOUDY,
    "rainy": Weather.RAINY, "lluvioso": Weather.RAINY,
    "windy": Weather.WINDY, "ventoso": Weather.WINDY,
}
_NONE_WORDS = {"", "none", "-", "any"}


def parse_kv(args: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"expected key=value, got {arg!r}")
        out[key.strip().lower()] = value.strip()
    return out


def _word(table: dict, raw: str, what: str):
    value = table.get(raw.strip().lower())
    if value is None:
        raise ValueError(f"unknown {what}: {raw!r} (use one of: {', '.join(sorted(table))})")
    return value


def parse_priority(raw: str) -> Priority:
    return _word(_PRIORITY_WORDS, raw, "priority")


def parse_status(raw: str) -> TaskStatus:
    return _word(_STATUS_WORDS, raw, "status")


def parse_weather(raw: str) -> Weather | None:
    if raw.strip().lower() in _NONE_WORDS | {"unknown", "desconocido"}:
        return None
    return _word(_WEATHER_WORDS, raw, "weather")


def _optional(raw: str) -> str | None:
    return None if raw.strip().lower() in _NONE_WORDS else raw.strip()


def _parse_id(raw: str) -> int:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        raise ValueError(f"invalid task id: {raw!r}") from None


def _today() -> str:
    return date_cls.today().isoformat()


def draft_from_fields(fields: dict[str, str], base: TaskDraft | None = None) -> TaskDraft:
    """Build a TaskDraft from key=value input, on top of `base` for edits."""
    known = {"name", "date", "duration", "start", "priority", "status", "after", "weather", "note"}
    unknown = set(fields) - known
    if unknown:
        raise ValueError(f"unknown field(s): {', '.join(sorted(unknown))}")

    values: dict[str, object] = {}
    if "name" in fields:
        values["name"] = fields["name"]
    if "date" in fields:
        values["date"] = fields["date"]
    if "duration" in fields:
        try:
            values["duration_minutes"] = int(fields["duration"])
        except ValueError:
            raise ValueError(f"invalid duration: {fields['duration']!r}") from None
    if "start" in fields:
        values["desired_start_time"] = _optional(fields["start"])
    if "priority" in fields:
        values["priority"] = parse_priority(fields["priority"])
    if "status" in fields:
        values["status"] = parse_status(fields["status"])
    if "after" in fields:
        after = _optional(fields["after"])
        values["depends_on_id"] = _parse_id(after) if after else None
    if "weather" in fields:
        values["allowed_weather"] = parse_weather(fields["weather"])
    if "note" in fields:
        values["note"] = _optional(fields["note"])

    if base is not None:
        return replace(base, **values)

    if "name" not in values or "duration_minutes" not in values:
        raise ValueError("name=... and duration=... are required")
    values.setdefault("date", _today())
    return TaskDraft(**values)  # type: ignore[arg-type]


# ---- rendering ----


def format_task(state: AppState, task: Task) -> str:
    parts = [
        f"#{task.id}",
        f"[{task.priority.name}]",
        task.name,
        f"| {task.date}",
        f"| {task.duration_minutes} min",
    ]
    if task.desired_start_time:
        parts.append(f"| {task.desired_start_time}")
    parts.append(f"| {task.status.name}")
    if task.allowed_weather:
        parts.append(f"| {task.allowed_weather.name.lower()}")
    line = " ".join(parts)
    if task.depends_on_id is not None:
        line += f"\n      depends on: {state.task_store.display_name(task.depends_on_id)}"
    if task.note:
        line += f"\n      note: {task.note}"
    return line


def format_plan(outcome: PlanOutcome) -> str:
    result = outcome.result
    lines = [
        plan_status_line(result),
        f"  Available: {result.available_minutes} min | Used: {result.used_minutes} min"
        f" | Free: {result.remaining_minutes} min",
    ]
    if result.scheduled_slots:
        lines.append("  Timeline:")
        for slot in result.scheduled_slots:
            lines.append(f"    {slot.start} - {slot.end}  {slot.name} ({slot.duration_minutes} min)")
    if result.unscheduled:
        lines.append("  Not scheduled:")
        for task in result.unscheduled:
            weathers = f" (requires weather: {', '.join(task.weathers)})" if task.weathers else ""
            lines.append(f"    {task.name} - {task.duration_minutes} min, {task.priority.name}{weathers}")
    if not result.feasible and result.suggestions:
        lines.append(f"  Suggestions: {result.suggestions}")
    if outcome.skipped_ids:
        lines.append(f"  Already completed (left as is): {', '.join(f'#{i}' for i in outcome.skipped_ids)}")
    for task_id, msg in outcome.failures.items():
        lines.append(f"  Could not mark #{task_id} as planned: {msg}")
    return "\n".join(lines)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    s = state.settings
    stats = state.task_store.statistics()
    f = state.active_filter
    filt = "none" if f.is_empty else f"date={f.date} status={f.status} priority={f.priority}"
    return (
        "Status:\n"
        f"  Backend: {getattr(s, 'api_base_url', '?')}\n"
        f"  User id: {state.user_id}\n"
        f"  Tasks loaded: {'yes' if state.task_store.loaded else 'no'} ({stats.total})\n"
        f"  Active filter: {filt}"
    )


async def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    tasks = await refresh_tasks(state)
    return f"Loaded {len(tasks)} task(s)."


async def cmd_tasks(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /tasks                    -> list with the active filter
    /tasks clear              -> drop the filter
    /tasks date=.. status=.. priority=..  -> set the filter
    /tasks server status=..|priority=..|date=..  -> ask the server instead
    """
    if args and args[0].lower() == "server":
        return await _server_query(state, args[1:])

    if not state.task_store.loaded:
        await refresh_tasks(state)

    if args and args[0].lower() == "clear":
        state.active_filter = TaskFilter()
    elif args:
        fields = parse_kv(args)
        unknown = set(fields) - {"date", "status", "priority"}
        if unknown:
            raise ValueError(f"unknown filter(s): {', '.join(sorted(unknown))}")
        state.active_filter = TaskFilter(
            date=_optional(fields["date"]) if "date" in fields else None,
            status=parse_status(fields["status"]) if _optional(fields.get("status", "")) else None,
            priority=parse_priority(fields["priority"]) if _optional(fields.get("priority", "")) else None,
        )

    tasks = state.task_store.filter(state.active_filter)
    if not tasks:
        return "No tasks. Add one with /add name=... duration=..."
    return "\n".join(format_task(state, t) for t in tasks)


async def _server_query(state: AppState, args: list[str]) -> str:
    fields = parse_kv(args)
    if len(fields) != 1 or not set(fields) <= {"date", "status", "priority"}:
        raise ValueError("use exactly one of: /tasks server date=.. | status=.. | priority=..")
    key, value = next(iter(fields.items()))
    if key == "status":
        tasks = await state.tasks.list_by_status(parse_status(value))
    elif key == "priority":
        tasks = await state.tasks.list_by_priority(parse_priority(value))
    else:
        tasks = await state.tasks.list_by_date(value, user_id=state.user_id)
    if not tasks:
        return "No tasks on the server match."
    return "\n".join(format_task(state, t) for t in tasks)


async def cmd_day(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/day [YYYY-MM-DD] -> ask the server for this user's tasks on a date (default today)."""
    day = args[0] if args else _today()
    tasks = await state.tasks.list_by_date(day, user_id=state.user_id)
    if not tasks:
        return f"No tasks on {day}."
    return "\n".join(format_task(state, t) for t in tasks)


async def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.task_store.loaded:
        await refresh_tasks(state)
    st = state.task_store.statistics()
    return (
        f"Total: {st.total} | Pending: {st.pending} | Planned: {st.planned} | Completed: {st.completed}\n"
        f"High: {st.by_priority.get(Priority.HIGH, 0)} | Medium: {st.by_priority.get(Priority.MEDIUM, 0)}"
        f" | Low: {st.by_priority.get(Priority.LOW, 0)} | Open for planning: {st.open}"
    )


async def cmd_show(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return "Usage: /show ID"
    task = await state.tasks.get_task(_parse_id(args[0]))
    return format_task(state, task)


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/add name="Buy bread" duration=30 [date=YYYY-MM-DD] [start=HH:MM] [priority=high] [after=ID] [weather=sunny] [note=...]"""
    if not args:
        return (
            "Usage: /add name=... duration=MIN [date=YYYY-MM-DD] [start=HH:MM]"
            " [priority=low|medium|high] [after=ID] [weather=sunny|cloudy|rainy|windy] [note=...]"
        )
    draft = draft_from_fields(parse_kv(args))
    task = await create_task(state, draft)
    return f"Created #{task.id}: {task.name}"


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit ID              -> show the task and the tasks it may depend on
    /edit ID key=value .. -> replace the given fields
    """
    if not args:
        return "Usage: /edit ID key=value ... (same keys as /add, plus status=...; after=none drops the dependency)"
    task_id = _parse_id(args[0])
    if not state.task_store.loaded:
        await refresh_tasks(state)
    current = state.task_store.find_by_id(task_id)
    if current is None:
        raise TaskNotFoundError(task_id)

    if len(args) == 1:
        candidates = state.task_store.dependency_candidates(task_id)
        lines = [format_task(state, current), "Possible prerequisites (after=ID):"]
        lines += [f"  #{t.id} {t.name}" for t in candidates] or ["  (none)"]
        return "\n".join(lines)

    draft = draft_from_fields(parse_kv(args[1:]), base=TaskDraft.from_task(current))
    task = await update_task(state, task_id, draft)
    return f"Updated #{task.id}: {task.name}"


async def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /rm ID          -> delete, or list the dependents that would go too
    /rm ID confirm  -> delete with all dependents
    """
    if not args:
        return "Usage: /rm ID [confirm]"
    task_id = _parse_id(args[0])
    confirmed = len(args) > 1 and args[1].lower() in ("confirm", "yes", "y")

    outcome = await delete_task(state, task_id, confirmed=confirmed)
    if outcome.requires_confirmation:
        lines = [
            f'Task "{outcome.task.name}" has {len(outcome.closure)} dependent task(s) that will be deleted too:',
        ]
        for i, t in enumerate(outcome.closure, start=1):
            lines.append(f"  {i}. {t.name}")
        lines.append(f"Total to delete: {outcome.total}. Repeat with /rm {task_id} confirm")
        return "\n".join(lines)

    if outcome.closure:
        return f"Deleted {outcome.total} task(s)."
    return f"Deleted #{task_id}."


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return "Usage: /done ID"
    task = await complete_task(state, _parse_id(args[0]))
    return f"Completed #{task.id}: {task.name}"


def _plan_request(state: AppState, args: list[str]) -> PlanRequest:
    fields = parse_kv(args)
    unknown = set(fields) - {"date", "weather", "minutes", "start"}
    if unknown:
        raise ValueError(f"unknown field(s): {', '.join(sorted(unknown))}")

    prev = state.last_plan_request
    if "weather" not in fields and prev is None:
        raise ValueError("weather=... is required (sunny, cloudy, rainy, windy or unknown)")
    try:
        minutes = int(fields["minutes"]) if "minutes" in fields else (prev.available_minutes if prev else 480)
    except ValueError:
        raise ValueError(f"invalid minutes: {fields['minutes']!r}") from None

    return PlanRequest(
        date=fields.get("date") or (prev.date if prev else _today()),
        weather=parse_weather(fields["weather"]) if "weather" in fields else prev.weather,  # type: ignore[union-attr]
        available_minutes=minutes,
        start_time=fields.get("start") or (prev.start_time if prev else "08:00"),
    )


async def cmd_plan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/plan weather=sunny [date=YYYY-MM-DD] [minutes=480] [start=08:00]"""
    request = _plan_request(state, args)
    if emit:
        emit(f"[PLAN] Planning {request.date}...")
    outcome = await generate_plan(state, request)
    return format_plan(outcome)


async def cmd_replan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    request = _plan_request(state, args)
    if emit:
        emit(f"[PLAN] Replanning {request.date} with open tasks...")
    outcome = await generate_plan(state, request, replan=True)
    return format_plan(outcome)


def cmd_export(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /export        -> print the last plan as text
    /export PATH   -> write it to PATH
    """
    if state.last_plan is None or state.last_plan_request is None or not state.last_plan.scheduled_slots:
        return "There is no generated plan to export."
    text = render_plan_text(state.last_plan_request, state.last_plan)
    if not args:
        return text
    path = Path(args[0]).expanduser()
    path.write_text(text, "utf-8")
    logger.info("Plan exported to %s", path)
    return f"Plan written to {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, user and filter.")
registry.register("refresh", cmd_refresh, help_text="Reload all tasks from the server.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [date=..] [status=..] [priority=..] | /tasks clear | /tasks server status=..", aliases=["ls"])
registry.register("day", cmd_day, help_text="Tasks on a date, straight from the server: /day [YYYY-MM-DD].")
registry.register("stats", cmd_stats, help_text="Task counts by status and priority.")
registry.register("show", cmd_show, help_text="Show one task: /show ID.")
registry.register("add", cmd_add, help_text="Create a task: /add name=... duration=MIN [start=HH:MM] [after=ID] ...")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit ID key=value ... (/edit ID lists possible prerequisites)")
registry.register("rm", cmd_rm, help_text="Delete a task and its dependents: /rm ID [confirm].", aliases=["delete"])
registry.register("done", cmd_done, help_text="Mark a task completed: /done ID.")
registry.register("plan", cmd_plan, help_text="Plan a day: /plan weather=.. [date=..] [minutes=..] [start=HH:MM].")
registry.register("replan", cmd_replan, help_text="Plan again with open tasks only (same options as /plan).")
registry.register("export", cmd_export, help_text="Print or save the last plan: /export [PATH].")
