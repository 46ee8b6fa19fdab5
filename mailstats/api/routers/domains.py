from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from mailstats.api.deps import open_mailgun, require_range
from mailstats.api.envelope import EnvelopeError, ok
from mailstats.mailgun.errors import UnsafePaginationURL, describe

log = logging.getLogger(__name__)

router = APIRouter()


def _upstream_failed(message: str, exc: Exception) -> EnvelopeError:
    return EnvelopeError(500, message, error=describe(exc))


@router.get("/stats/{account}/{domain}")
async def get_domain_stats(
    request: Request, account: str, domain: str, start: str | None = None, end: str | None = None
) -> dict:
    start_at, end_at = require_range(start, end, message="Start and end dates are required")

    async with open_mailgun(request, account) as mg:
        try:
            stats = await mg.domain_stats(domain, start_at, end_at)
        except Exception as e:
            log.exception("Error fetching domain stats for %s/%s", account, domain)
            raise _upstream_failed("Failed to fetch domain stats", e)

    return ok(stats)


@router.get("/stats/{account}")
async def get_overall_stats(request: Request, account: str, start: str | None = None, end: str | None = None) -> dict:
    start_at, end_at = require_range(start, end, message="Start and end dates are required")

    async with open_mailgun(request, account) as mg:
        try:
            stats = await mg.account_stats(start_at, end_at)
        except Exception as e:
            log.exception("Error fetching overall stats for %s", account)
            raise _upstream_failed("Failed to fetch overall stats", e)

    return ok(stats)


# Registered before /events/{account}/{domain}, which would otherwise capture it.
@router.get("/events/pagination/{account}")
async def get_events_pagination(request: Request, account: str, url: str | None = None) -> dict:
    if not url:
        raise EnvelopeError(400, "URL parameter is required")

    async with open_mailgun(request, account) as mg:
        try:
            page = await mg.follow_page(url)
        except UnsafePaginationURL as e:
            log.warning("Rejected pagination URL for %s: %s", account, url)
            raise EnvelopeError(400, str(e))
        except Exception as e:
            log.exception("Error fetching paginated events for %s", account)
            raise _upstream_failed("Failed to fetch paginated events", e)

    return ok(page)


@router.get("/events/{account}/{domain}")
async def get_domain_events(
    request: Request,
    account: str,
    domain: str,
    begin: str | None = None,
    end: str | None = None,
    ascending: str | None = None,
    limit: str | None = None,
    event: str | None = None,
) -> dict:
    begin_at, end_at = require_range(begin, end, message="Begin and end dates are required")

    async with open_mailgun(request, account) as mg:
        try:
            events = await mg.domain_events(domain, begin_at, end_at, ascending=ascending, limit=limit, event=event)
        except Exception as e:
            log.exception("Error fetching domain events for %s/%s", account, domain)
            raise _upstream_failed("Failed to fetch domain events", e)

    return ok(events)


@router.get("/{account}")
async def get_domains(request: Request, account: str) -> dict:
    async with open_mailgun(request, account) as mg:
        try:
            domains = await mg.list_domains()
        except Exception as e:
            log.exception("Error fetching domains for %s", account)
            raise _upstream_failed("Failed to fetch domains", e)

    return ok(domains)
