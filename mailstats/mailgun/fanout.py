from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any

import httpx

from mailstats.mailgun.errors import describe

log = logging.getLogger(__name__)

FAILED_TO_FETCH = "Failed to fetch data"


class EventKind(str, Enum):
    ACCEPTED = "accepted"
    DELIVERED = "delivered"
    FAILED = "failed"
    OPENED = "opened"
    CLICKED = "clicked"


EVENT_KINDS: tuple[str, ...] = tuple(k.value for k in EventKind)


def failure_marker(key: str, message: str | None = None) -> dict[str, Any]:
    return {"event": key, "items": [], "error": True, "message": message or FAILED_TO_FETCH}


async def _isolated(key: str, make_op: Callable[[str], Awaitable[Any]], *, label: str) -> tuple[Any, str | None]:
    """Await one branch; a failure becomes (None, reason) instead of propagating."""
    try:
        return await make_op(key), None
    except Exception as e:
        log.warning("Error fetching %s, event %s: %s", label, key, describe(e))
        if isinstance(e, httpx.HTTPStatusError):
            log.warning("Status: %s, Data: %s", e.response.status_code, e.response.text[:500])
        return None, describe(e)


async def fan_out(
    keys: Iterable[str],
    make_op: Callable[[str], Awaitable[Any]],
    *,
    label: str = "stats",
) -> dict[str, Any]:
    """Run make_op(key) for every key concurrently and merge by key.

    Never raises because some branches failed: each failed key gets a
    failure_marker and the other keys keep their payloads untouched.
    """
    keys = [str(getattr(k, "value", k)) for k in keys]
    results = await asyncio.gather(
        *[_isolated(k, make_op, label=label) for k in keys],
        return_exceptions=True,
    )

    combined: dict[str, Any] = {}
    for key, result in zip(keys, results, strict=True):
        if isinstance(result, BaseException):
            combined[key] = failure_marker(key, describe(result))
            continue
        payload, reason = result
        combined[key] = payload if payload is not None else failure_marker(key, reason)
    return combined
