from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mailstats.api.envelope import EnvelopeError, envelope_error_handler
from mailstats.api.routers.domains import router as domains_router
from mailstats.core.config import Settings, split_csv
from mailstats.core.db import check_database, make_engine
from mailstats.core.logging import configure_logging
from mailstats.mailgun.credentials import CredentialResolver
from mailstats.mailgun.retry import Sleep

log = logging.getLogger("mailstats")


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleep | None = None,
) -> FastAPI:
    """Build the ASGI app from an explicit Settings object.

    Credentials are resolved here, so an account listed in MAILGUN_ACCOUNTS
    without a key fails app construction instead of the first request.
    `transport` and `sleep` replace the network and backoff delay in tests.
    """
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.credentials = CredentialResolver.from_settings(settings)
    app.state.engine = make_engine(settings.DATABASE_URL)
    app.state.mailgun_transport = transport
    app.state.mailgun_sleep = sleep

    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(settings.CORS_ALLOW_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(EnvelopeError, envelope_error_handler)

    @app.on_event("startup")
    def _startup() -> None:
        if not settings.CHECK_DATABASE_ON_STARTUP:
            log.info("Startup: CHECK_DATABASE_ON_STARTUP=false; skipping database check")
            return
        if check_database(app.state.engine):
            log.info("Startup: connected to database")
        else:
            # Handlers never touch the database, so keep serving.
            log.error("Startup: database connection failed")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "ok": True,
            "app": settings.APP_NAME,
            "database": check_database(app.state.engine),
            "accounts": len(app.state.credentials.accounts()),
        }

    app.include_router(domains_router, prefix="/api/domains", tags=["domains"])
    return app


app = create_app()
