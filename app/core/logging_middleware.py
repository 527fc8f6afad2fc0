import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request; tokens passed as ``?jwt=`` are never logged."""

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s -> unhandled error (%.2fs)",
                request.method,
                path,
                time.monotonic() - start,
            )
            raise

        duration = time.monotonic() - start
        response.headers["X-Process-Time"] = f"{duration:.4f}"
        log = logger.warning if response.status_code >= 500 else logger.info
        log("%s %s -> %s (%.2fs)", request.method, path, response.status_code, duration)

        return response
