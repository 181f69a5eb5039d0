from __future__ import annotations

import time
import uuid
from typing import Tuple

import structlog
from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..estimation.errors import (
    DegenerateInterpolation,
    EstimationError,
    IncompleteObservationSet,
    InsufficientStations,
)

logger = structlog.get_logger()


class RequestIDMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        request_id = uuid.uuid4().hex
        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        status = {"code": 500}

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                status["code"] = message.get("status", 500)
                headers = message.setdefault("headers", [])
                headers.append((b"x-request-id", request_id.encode()))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "request_completed",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                status=status["code"],
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            structlog.contextvars.unbind_contextvars("request_id")


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", None), "request_id", None) or ""


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    body = {"error": {"code": code, "message": message, "request_id": _request_id(request)}}
    # Header added by RequestIDMiddleware; avoid duplicates here
    return JSONResponse(status_code=status_code, content=body)


def classify_estimation_error(exc: EstimationError) -> Tuple[int, str]:
    if isinstance(exc, (InsufficientStations, IncompleteObservationSet)):
        return 503, "insufficient_data"
    if isinstance(exc, DegenerateInterpolation):
        return 422, "degenerate_geometry"
    return 500, "internal_error"


async def estimation_exception_handler(request: Request, exc: EstimationError) -> JSONResponse:
    status_code, code = classify_estimation_error(exc)
    return _error(request, status_code, code, str(exc))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    code = "service_unavailable" if exc.status_code == 503 else "http_error"
    return _error(request, exc.status_code, code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return _error(request, 422, "invalid_request", f"Invalid parameters: {', '.join(fields)}")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc))
    return _error(request, 500, "internal_error", str(exc))
