"""Request and text-generation counters kept in Redis."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from docflow.db.redis import get_redis

logger = logging.getLogger(__name__)

REQUEST_COUNTS_KEY = "metrics:request_counts"
LATENCIES_KEY = "metrics:latencies"
GENERATION_SOURCES_KEY = "metrics:generation_sources"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests per route/status and keep the latest latency per route."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time

        # Use the route template so /documents/<uuid> paths share a counter
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        try:
            redis = get_redis()
            await redis.hincrby(REQUEST_COUNTS_KEY, f"{request.method} {path}:{response.status_code}", 1)
            await redis.hset(LATENCIES_KEY, path, f"{elapsed:.4f}")
        except Exception as e:
            logger.debug("Metrics not recorded: %s", e)

        return response


async def record_generation_source(source: str) -> None:
    """Count which backend (upstream provider or local fallback) produced text."""
    try:
        await get_redis().hincrby(GENERATION_SOURCES_KEY, source, 1)
    except Exception as e:
        logger.debug("Generation metric not recorded: %s", e)


async def snapshot() -> dict:
    """Read all counters back for the /metrics endpoint."""
    redis = get_redis()
    counts = await redis.hgetall(REQUEST_COUNTS_KEY)
    latencies = await redis.hgetall(LATENCIES_KEY)
    sources = await redis.hgetall(GENERATION_SOURCES_KEY)
    return {
        "request_counts": {k: int(v) for k, v in counts.items()},
        "latencies_ms": {k: float(v) * 1000 for k, v in latencies.items()},
        "generation_sources": {k: int(v) for k, v in sources.items()},
    }
