"""Logging setup and the per-request access log."""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

access_logger = logging.getLogger("contacts_api.access")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request: method, path, status and duration."""

    def __init__(self, app, *, verbose: bool) -> None:
        super().__init__(app)
        self._verbose = verbose

    def _log(self, request: Request, status_code: int, started: float) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        if self._verbose:
            access_logger.info("%s %s %s %.1fms", request.method, request.url.path, status_code, duration_ms)
        else:
            client = request.client.host if request.client else "-"
            access_logger.info(
                "%s %s %s %s %.1fms", client, request.method, request.url.path, status_code, duration_ms
            )

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # the error handler renders the 500 further out
            self._log(request, 500, started)
            raise
        self._log(request, response.status_code, started)
        return response
