from __future__ import annotations

from collections.abc import Callable

import httpx

from mailstats.core.config import Settings

Handler = Callable[[httpx.Request], httpx.Response]


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite+pysqlite:///:memory:",
        "CHECK_DATABASE_ON_STARTUP": False,
        "MAILGUN_API_KEYS": {"ACME": "key-acme"},
        "MAILGUN_ACCOUNTS": "",
    }
    values.update(overrides)
    return Settings(**values)


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"items": [], "path": request.url.path})


class FakeMailgun:
    """Records every request that reaches the network and answers via `handler`."""

    def __init__(self, handler: Handler = ok_handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
