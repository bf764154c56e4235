"""
Access log middleware: one structured line per request with its duration.

Bodies are never logged; payment and webhook payloads carry customer data.
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging_config import get_logger


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=round(time.perf_counter() - start_time, 3),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            # Exception handlers render the response
            raise

        duration = time.perf_counter() - start_time
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration=round(duration, 3),
            query_params=dict(request.query_params),
        )
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response
