"""Rate limiting middleware using Redis."""

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class RateLimitRule:
    """A fixed-window limit for one group of routes, counted per client IP."""
    name: str
    method: str
    path_pattern: re.Pattern
    limit: int
    window_seconds: int

    def matches(self, method: str, path: str) -> bool:
        return method == self.method and bool(self.path_pattern.match(path))


def default_rules() -> list:
    return [
        RateLimitRule(
            name="checkout",
            method="POST",
            path_pattern=re.compile(r"^/api/store/[^/]+/orders$"),
            limit=settings.rate_limit_checkout_per_minute,
            window_seconds=60,
        ),
        RateLimitRule(
            name="auth",
            method="POST",
            path_pattern=re.compile(r"^/api/auth/(login|register)$"),
            limit=settings.rate_limit_auth_per_window,
            window_seconds=settings.rate_limit_auth_window_seconds,
        ),
    ]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using Redis for distributed rate limiting.

    Only the public checkout and the auth endpoints are limited. When Redis is
    unreachable requests go through unlimited.
    """

    def __init__(self, app, rules: Optional[list] = None):
        super().__init__(app)
        self.rules = rules if rules is not None else default_rules()
        self.redis_client: Optional[redis.Redis] = None
        if settings.rate_limit_enabled:
            self._initialize_redis()

    def _initialize_redis(self):
        """Initialize Redis connection."""
        try:
            self.redis_client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                max_connections=settings.redis_pool_size,
            )
            logger.info("Redis client initialized for rate limiting")
        except Exception as e:
            logger.error(f"Failed to initialize Redis client: {e}")
            self.redis_client = None

    async def dispatch(self, request: Request, call_next):
        """Apply rate limiting to requests."""
        if not settings.rate_limit_enabled or not self.redis_client:
            return await call_next(request)

        rule = self._match_rule(request)
        if rule is None:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        try:
            count = await self._hit(rule, client_ip)
        except redis.RedisError as e:
            logger.error(f"Redis error during rate limiting: {e}")
            return await call_next(request)

        if count > rule.limit:
            logger.warning(f"Rate limit exceeded for {rule.name} from {client_ip}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "errors": [{
                        "status": "429",
                        "code": "RATE_LIMIT_EXCEEDED",
                        "title": "Too Many Requests",
                        "detail": "Too many requests, please try again later",
                        "meta": {"retry_after": rule.window_seconds},
                    }]
                },
                headers={
                    "Retry-After": str(rule.window_seconds),
                    "X-RateLimit-Limit": str(rule.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rule.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rule.limit - count))
        return response

    def _match_rule(self, request: Request) -> Optional[RateLimitRule]:
        for rule in self.rules:
            if rule.matches(request.method, request.url.path):
                return rule
        return None

    async def _hit(self, rule: RateLimitRule, client_ip: str) -> int:
        """Count this request in the current window and return the window total."""
        window = int(time.time()) // rule.window_seconds
        key = f"rate_limit:{rule.name}:{client_ip}:{window}"

        async with self.redis_client.pipeline() as pipe:
            pipe.incr(key)
            pipe.expire(key, rule.window_seconds)
            results = await pipe.execute()

        return results[0]

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"
