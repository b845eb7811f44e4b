# src/agenda_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the httpx gateways and the TaskStore into AppState,
- closes the HTTP clients on shutdown.
"""

from __future__ import annotations

import logging

import httpx

from ..api.http import build_async_client
from ..api.planner_client import HttpPlannerGateway
from ..api.task_client import HttpTaskGateway
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, transport: httpx.AsyncBaseTransport | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easier
    to test and avoids hidden global config reads. If settings is None, falls
    back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    tasks = HttpTaskGateway(build_async_client(settings, transport=transport), user_id=settings.user_id)
    planner = HttpPlannerGateway(build_async_client(settings, transport=transport), user_id=settings.user_id)

    state = AppState(
        settings=settings,
        tasks=tasks,
        planner=planner,
        task_store=TaskStore(tasks),
    )
    logger.debug("AppState ready backend=%s user_id=%s", settings.api_base_url, settings.user_id)
    return state


async def shutdown_state(state: AppState) -> None:
    """Close HTTP clients and drop the cached tasks."""
    state.task_store.clear()
    for gateway in (state.tasks, state.planner):
        aclose = getattr(gateway, "aclose", None)
        if aclose is None:
            continue
        try:
            await aclose()
        except httpx.HTTPError:
            logger.debug("HTTP client close failed.", exc_info=True)
