"""Logging middleware for request/response tracking."""

import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.settings import get_settings

settings = get_settings()

SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}


def configure_logging():
    """
    Configure structured logging with JSON output.

    Service modules log through stdlib ``logging``; their records go through
    the same processor chain, so request-scoped context bound by the middleware
    (request id, tenant, user) appears on every line.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    ))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.log_level))


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request start and finish with a request id and timing.

    Runs inside the authentication middleware, so the tenant and user of an
    authenticated request are known when the start line is written.
    """

    def __init__(self, app, logger_name: str = "storefront.http"):
        super().__init__(app)
        self.logger = structlog.get_logger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start_time = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            tenant_id=getattr(request.state, "tenant_id", None),
            user_id=getattr(request.state, "user_id", None),
        )
        request.state.request_id = request_id

        request_data = {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("user-agent", ""),
        }
        if settings.debug:
            request_data["headers"] = self._sanitize_headers(dict(request.headers))

        self.logger.info("HTTP request started", **request_data)

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "HTTP request failed with exception",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=str(e),
                process_time_ms=self._elapsed_ms(start_time),
            )
            raise

        response_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": self._elapsed_ms(start_time),
        }
        if response.status_code < 400:
            self.logger.info("HTTP request completed successfully", **response_data)
        elif response.status_code < 500:
            self.logger.warning("HTTP request completed with client error", **response_data)
        else:
            self.logger.error("HTTP request completed with server error", **response_data)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(response_data["process_time_ms"] / 1000)
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address with proxy support."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip
        if request.client:
            return request.client.host
        return "unknown"

    def _sanitize_headers(self, headers: dict) -> dict:
        return {
            key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }
