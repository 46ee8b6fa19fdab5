from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def fail(message: str, error: str | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        out["error"] = error
    return out


class EnvelopeError(Exception):
    """Raised inside a route to answer with {success: false, ...} and a status code."""

    def __init__(self, status_code: int, message: str, error: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error


async def envelope_error_handler(request: Request, exc: EnvelopeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message, exc.error))
