"""Request logging middleware."""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("docforge.api")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and one per response, tagged with a request id.

    An incoming ``X-Request-ID`` header is reused; otherwise a short id is
    generated. The id is echoed back on the response.
    """

    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health"]

    async def dispatch(self, request: Request, call_next) -> Response:
        if any(request.url.path.startswith(p) for p in self.exclude_paths):
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()
        method = request.method
        path = request.url.path

        logger.info("[%s] %s %s - client %s", request_id, method, path, self._client_ip(request))

        try:
            response = await call_next(request)
        except Exception:
            duration = (time.perf_counter() - started) * 1000
            logger.exception("[%s] %s %s - ERROR after %.2fms", request_id, method, path, duration)
            raise

        duration = (time.perf_counter() - started) * 1000
        status = response.status_code
        level = logging.INFO if status < 400 else logging.WARNING if status < 500 else logging.ERROR
        logger.log(level, "[%s] %s %s - %d - %.2fms", request_id, method, path, status, duration)

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _client_ip(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
