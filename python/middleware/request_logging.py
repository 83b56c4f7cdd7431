"""
Request logging middleware.
Logs method, path, status and duration of every /api request.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import get_logger

logger = get_logger("api.requests")


def _fields(extra: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in extra.items() if v is not None)


def log_request(log: logging.Logger, method: str, path: str, **extra) -> None:
    log.info(f"→ {method} {path} {_fields(extra)}".strip())


def log_response(log: logging.Logger, status: int, duration_ms: float, **extra) -> None:
    """Server errors at WARNING, everything else at INFO."""
    level = logging.WARNING if status >= 500 else logging.INFO
    log.log(level, f"← {status} ({duration_ms:.1f}ms) {_fields(extra)}".strip())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Rules:
    - OPTIONS: not logged (CORS preflight)
    - Non-/api/ paths: not logged (docs, favicon)
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or not path.startswith("/api/"):
            return await call_next(request)

        log_request(logger, request.method, path, query=request.url.query or None)
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        log_response(logger, response.status_code, duration_ms, path=path)
        return response
