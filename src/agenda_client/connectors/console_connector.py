# src/agenda_client/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import ServiceError, TaskNotFoundError, TaskValidationError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def handle_line(state: AppState, line: str) -> str | None:
    """
    Run one console line and turn domain errors into user-facing text.

    Validation problems ask the user to fix the input; service problems ask
    them to retry. Nothing is retried automatically.
    """

    def emit(text: str) -> None:
        # Immediate feedback for slow operations (planning)
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        return await command_registry.handle(state, line, emit=emit)
    except TaskValidationError as e:
        return f"[{e.title}] {e.message}"
    except TaskNotFoundError as e:
        return f"[Not found] {e}"
    except ServiceError as e:
        logger.info("Service error: %s", e)
        return f"[Server] {e}. Check the backend and try again."
    except ValueError as e:
        return f"[Input] {e}"


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (backend=%s).", getattr(state.settings, "api_base_url", "?"))
    _print_ts("[CONSOLE] Use /help for commands, /tasks to list tasks. Use /exit to quit.\n")

    try:
        reply = await handle_line(state, "/refresh")
        _print_ts(reply or "")
    except Exception:
        logger.exception("Initial task load crashed.")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await handle_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue

        _print_ts(reply)

    logger.info("Console connector finished.")
