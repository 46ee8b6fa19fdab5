from __future__ import annotations

from fastapi import Request

from mailstats.api.envelope import EnvelopeError
from mailstats.core.config import Settings
from mailstats.mailgun.client import MailgunClient, parse_when
from mailstats.mailgun.credentials import CredentialResolver
from mailstats.mailgun.errors import CredentialNotConfigured


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credentials(request: Request) -> CredentialResolver:
    return request.app.state.credentials


def open_mailgun(request: Request, account: str) -> MailgunClient:
    """Client for `account`; answers 500 before any network call if it has no key."""
    try:
        api_key = get_credentials(request).resolve(account)
    except CredentialNotConfigured as e:
        raise EnvelopeError(500, str(e))

    state = request.app.state
    return MailgunClient(
        get_settings(request),
        api_key,
        transport=getattr(state, "mailgun_transport", None),
        sleep=getattr(state, "mailgun_sleep", None),
    )


def require_range(start: str | None, end: str | None, *, message: str):
    if not start or not end:
        raise EnvelopeError(400, message)
    try:
        return parse_when(start), parse_when(end)
    except ValueError as e:
        raise EnvelopeError(400, "Invalid date parameters", error=str(e))
