"""Redis client and the refresh-token registry.

Redis also backs rate limiting and the metrics counters, which reach the
client through ``get_redis``.
"""

from typing import Optional
from uuid import UUID

import redis.asyncio as aioredis

from docflow.config import settings

redis_client: Optional[aioredis.Redis] = None

REFRESH_TOKEN_KEY = "refresh_token:{user_id}"


async def init_redis() -> None:
    global redis_client

    redis_client = aioredis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )
    await redis_client.ping()


async def close_redis() -> None:
    global redis_client

    if redis_client:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> aioredis.Redis:
    """Get Redis client instance."""
    if redis_client is None:
        raise RuntimeError("Redis is not initialized")
    return redis_client


async def store_refresh_token(user_id: UUID, token: str) -> None:
    """Remember ``token`` as the only refresh token ``user_id`` may exchange."""
    await get_redis().setex(
        REFRESH_TOKEN_KEY.format(user_id=user_id),
        settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        token,
    )


async def get_refresh_token(user_id: UUID) -> Optional[str]:
    return await get_redis().get(REFRESH_TOKEN_KEY.format(user_id=user_id))


async def revoke_refresh_token(user_id: UUID) -> None:
    """Forget the user's refresh token; their access tokens run out on their own."""
    await get_redis().delete(REFRESH_TOKEN_KEY.format(user_id=user_id))
