"""Rate limiting middleware using a Redis sliding window."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from docflow.config import settings

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health", "/metrics"}


def limit_for_path(path: str) -> tuple[str, int]:
    """Return the bucket name and request budget that apply to ``path``."""
    if path.startswith(f"{settings.API_V1_PREFIX}/ai/"):
        return "ai", settings.AI_RATE_LIMIT_REQUESTS
    return "api", settings.RATE_LIMIT_REQUESTS


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding window limits; text generation has its own, smaller budget."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        bucket, limit = limit_for_path(request.url.path)
        key = f"ratelimit:{bucket}:{self._get_client_id(request)}"
        is_allowed, remaining, reset_time = await self._check_rate_limit(key, limit)

        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset_time),
        }
        if not is_allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded", "retry_after": reset_time},
                headers={**headers, "Retry-After": str(reset_time)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    def _get_client_id(self, request: Request) -> str:
        """Identify the caller by bearer token when present, else by IP."""
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return f"user:{hash(auth_header)}"

        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()
        else:
            client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    async def _check_rate_limit(self, key: str, limit: int) -> tuple[bool, int, int]:
        """Check the window for ``key``.

        Returns:
            Tuple of (is_allowed, remaining_requests, reset_time_seconds)
        """
        window = settings.RATE_LIMIT_WINDOW
        try:
            from docflow.db.redis import get_redis

            redis = get_redis()
            now = time.time()
            member = f"{now:.6f}"

            pipe = redis.pipeline()
            pipe.zremrangebyscore(key, 0, now - window)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window)
            results = await pipe.execute()
            request_count = results[1]

            if request_count >= limit:
                await redis.zrem(key, member)
                return False, 0, window
            return True, max(0, limit - request_count - 1), window

        except Exception as e:
            # Redis unavailable: fail open
            logger.debug("Rate limiting skipped: %s", e)
            return True, limit, window
