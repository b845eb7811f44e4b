# src/agenda_client/api/http.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import ServiceError, ServiceUnavailableError

logger = logging.getLogger(__name__)


def make_timeout(*, connect_s: float, read_s: float) -> httpx.Timeout:
    # keep read >= connect as a sane baseline
    read_s = max(read_s, connect_s)
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def build_async_client(settings: Any, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """
    One AsyncClient per gateway, owned by AppState and closed on shutdown.

    No retries: a failed call is reported once and the user re-runs the command.
    """
    timeout = make_timeout(
        connect_s=float(getattr(settings, "connect_timeout_seconds", 5.0)),
        read_s=float(getattr(settings, "request_timeout_seconds", 10.0)),
    )
    return httpx.AsyncClient(
        base_url=str(settings.api_base_url),
        timeout=timeout,
        headers={"Accept": "application/json"},
        transport=transport,
    )


def extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()[:200] or response.reason_phrase
    if isinstance(data, dict):
        for key in ("message", "mensaje", "error", "detail"):
            if data.get(key):
                return str(data[key])
    return response.reason_phrase


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    what: str,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request and translate transport failures into ServiceError.

    `what` describes the operation for the user ("list tasks", ...). HTTP
    error statuses are left to the caller, which knows what 404 means.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        logger.warning("%s: %s %s timed out", service, method, url)
        raise ServiceUnavailableError(f"{service} did not answer in time ({what})") from exc
    except httpx.TransportError as exc:
        logger.warning("%s: %s %s failed: %s", service, method, url, exc.__class__.__name__)
        raise ServiceUnavailableError(
            f"Could not connect to the {service} at {client.base_url} ({what})"
        ) from exc

    logger.debug("%s: %s %s -> %s", service, method, url, response.status_code)
    return response


def raise_for_status(response: httpx.Response, *, service: str, what: str) -> None:
    if response.status_code >= 400:
        msg = extract_error_message(response)
        raise ServiceError(
            f"{service} error {response.status_code} ({what}): {msg}",
            status_code=response.status_code,
        )


def json_body(response: httpx.Response, *, service: str, what: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ServiceError(
            f"{service} returned an invalid response ({what})",
            status_code=response.status_code,
        ) from exc
