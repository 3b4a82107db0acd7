# hostelkit/core/middleware.py
"""
HTTP middleware: correlation ids, request timing and failure logging.
"""
from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostelkit.core.logging import actor_id as actor_id_var, get_logger, request_id as request_id_var

logger = get_logger(__name__)


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
    }


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Binds a correlation id (taken from the request or freshly minted) and
    the X-Actor-Id header to the logging context for the duration of the
    request, and echoes the id back on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        req_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = req_id
        id_token = request_id_var.set(req_id)
        actor_token = actor_id_var.set(request.headers.get("X-Actor-Id"))
        try:
            response = await call_next(request)
        finally:
            actor_id_var.reset(actor_token)
            request_id_var.reset(id_token)

        response.headers[self.header_name] = req_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.info(
            "Request handled",
            extra={**_request_fields(request), "status_code": response.status_code, "elapsed_s": round(elapsed, 4)},
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Warns on 4xx/5xx responses; logs and re-raises anything unhandled."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error while serving request",
                extra={**_request_fields(request), "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise

        if response.status_code >= 400:
            logger.warning(
                "Request failed",
                extra={**_request_fields(request), "status_code": response.status_code},
            )
        return response


def register_middlewares(app: FastAPI) -> None:
    # last added runs first: ids are bound before timing and error logging
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)


__all__ = [
    "ErrorLoggingMiddleware",
    "RequestIDMiddleware",
    "TimingMiddleware",
    "register_middlewares",
]
