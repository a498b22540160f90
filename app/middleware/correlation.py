"""
Correlation ID middleware for request tracing.

Generates a UUID4 correlation ID per request (or accepts X-Correlation-ID from client).
Stored in contextvars and stamped onto every log record by CorrelationFilter,
so generation retries and fallbacks can be traced back to the request.
"""
import logging
import uuid
import time
import contextvars
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from app.utils.logger import logger

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")
request_user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_user_id", default="")


def get_correlation_id() -> str:
    """Get the current request's correlation ID"""
    return correlation_id_var.get("")


class CorrelationFilter(logging.Filter):
    """Copies the request's correlation and user IDs onto log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get("")
        if not getattr(record, "user_id", None):
            record.user_id = request_user_id_var.get("")
        return True


def install_log_filter() -> None:
    for handler in logger.handlers:
        if not any(isinstance(f, CorrelationFilter) for f in handler.filters):
            handler.addFilter(CorrelationFilter())


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    1. Generates or accepts X-Correlation-ID
    2. Logs request start/completion with timing
    3. Returns correlation ID in response headers
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        correlation_id_var.set(cid)
        request_user_id_var.set("")

        start = time.monotonic()
        method = request.method
        path = request.url.path

        logger.info(
            f"{method} {path}",
            extra={
                "method": method,
                "path": path,
                "client_ip": request.client.host if request.client else "",
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((time.monotonic() - start) * 1000)
            logger.error(
                "request.failed",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                }
            )
            raise

        duration_ms = round((time.monotonic() - start) * 1000)
        status = response.status_code

        log_fn = logger.warning if status >= 400 else logger.info
        log_fn(
            f"Response: {status}",
            extra={
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": duration_ms,
            }
        )

        response.headers["X-Correlation-ID"] = cid
        return response
