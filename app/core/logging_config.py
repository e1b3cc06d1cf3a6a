# app/core/logging_config.py

"""
Logging setup for the application.

Modules log through `logging.getLogger(__name__)`; this module only configures
the root logger once at startup and provides the request-logging middleware.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

request_logger = logging.getLogger("app.request")

_configured = False


def setup_logging() -> None:
    global _configured
    if _configured:
        return
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    # uvicorn's access log duplicates the request logger below
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs `METHOD path status duration` for every request.
    5xx responses are logged at ERROR, 4xx at WARNING, everything else at INFO.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status_code = response.status_code
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        request_logger.log(
            level, "%s %s %d %.0fms", request.method, request.url.path, status_code, duration_ms
        )
        return response
