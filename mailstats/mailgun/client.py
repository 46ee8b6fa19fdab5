from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any
from urllib.parse import unquote

import httpx
from pydantic import TypeAdapter

from mailstats.core.config import Settings
from mailstats.mailgun.errors import UnsafePaginationURL
from mailstats.mailgun.fanout import EVENT_KINDS, fan_out
from mailstats.mailgun.retry import Attempt, RetryPolicy, Sleep, fetch_with_retry

_when = TypeAdapter(datetime)

DEFAULT_EVENT = "failed"
DEFAULT_ASCENDING = "yes"
DEFAULT_LIMIT = 300

# Leaves room for the one-day widening of an empty events window.
_LATEST = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=1)


def parse_when(value: str) -> datetime:
    """Parse an ISO date/datetime (or epoch seconds); naive values are UTC."""
    dt = _when.validate_python(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        dt = dt.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"date out of range: {value}") from e
    if dt > _LATEST:
        raise ValueError(f"date out of range: {value}")
    return dt


def rfc2822(dt: datetime) -> str:
    # e.g. "Mon, 01 Jan 2024 00:00:00 GMT"
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def check_pagination_url(url: str, *, allowed_prefix: str) -> str:
    decoded = unquote(url or "")
    if not decoded.startswith(allowed_prefix):
        raise UnsafePaginationURL("Invalid URL: Only Mailgun API URLs are allowed")
    return decoded


class MailgunClient:
    """Read-only Mailgun API client bound to one account's key.

    Use as an async context manager so the underlying connection pool is closed.
    """

    def __init__(
        self,
        settings: Settings,
        api_key: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ):
        self.settings = settings
        self.sleep = sleep or asyncio.sleep
        self.base = settings.MAILGUN_API_BASE.rstrip("/")
        self._http = httpx.AsyncClient(
            auth=("api", api_key),
            timeout=settings.API_TIMEOUT_S,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> MailgunClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _policy(self, max_retries: int) -> RetryPolicy:
        return RetryPolicy(max_retries=max_retries, base_delay_s=self.settings.RETRY_BASE_DELAY_S)

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        # httpx timeouts apply per phase; wait_for caps the whole call.
        resp = await asyncio.wait_for(self._http.get(url, params=params), timeout=self.settings.API_TIMEOUT_S)
        resp.raise_for_status()
        return resp.json()

    async def _get_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        max_retries: int,
        what: str,
        attempts: list[Attempt] | None = None,
    ) -> Any:
        return await fetch_with_retry(
            lambda: self._get_json(url, params),
            policy=self._policy(max_retries),
            what=what,
            sleep=self.sleep,
            attempts=attempts,
        )

    async def list_domains(self, *, attempts: list[Attempt] | None = None) -> Any:
        return await self._get_with_retry(
            f"{self.base}/v4/domains",
            max_retries=self.settings.DOMAINS_MAX_RETRIES,
            what="domains",
            attempts=attempts,
        )

    async def _stats(self, url: str, start: datetime, end: datetime, *, label: str) -> dict[str, Any]:
        query = {"start": rfc2822(start), "end": rfc2822(end)}

        def make_op(event: str):
            return self._get_with_retry(
                url,
                {**query, "event": event},
                max_retries=self.settings.STATS_MAX_RETRIES,
                what=f"{label} {event} stats",
            )

        return await fan_out(EVENT_KINDS, make_op, label=label)

    async def domain_stats(self, domain: str, start: datetime, end: datetime) -> dict[str, Any]:
        return await self._stats(f"{self.base}/v3/{domain}/stats/total", start, end, label=domain)

    async def account_stats(self, start: datetime, end: datetime) -> dict[str, Any]:
        return await self._stats(f"{self.base}/v3/stats/total", start, end, label="account")

    async def domain_events(
        self,
        domain: str,
        begin: datetime,
        end: datetime,
        *,
        ascending: str | None = None,
        limit: int | str | None = None,
        event: str | None = None,
    ) -> Any:
        # Mailgun rejects an empty window.
        if begin == end:
            end = end + timedelta(days=1)

        params = {
            "begin": rfc2822(begin),
            "end": rfc2822(end),
            "ascending": ascending or DEFAULT_ASCENDING,
            "limit": limit or DEFAULT_LIMIT,
            "event": event or DEFAULT_EVENT,
        }
        return await self._get_with_retry(
            f"{self.base}/v3/{domain}/events",
            params,
            max_retries=self.settings.EVENTS_MAX_RETRIES,
            what="domain events",
        )

    async def follow_page(self, url: str) -> Any:
        target = check_pagination_url(url, allowed_prefix=self.settings.MAILGUN_ALLOWED_URL_PREFIX)
        return await self._get_with_retry(
            target,
            max_retries=self.settings.EVENTS_MAX_RETRIES,
            what="pagination URL",
        )
