"""Payment-instruction cache backed by Redis.

  - Cache key: "platform:payment_instructions"
  - Read-through: cache -> DB on miss -> populate with TTL
  - Write path: DB commit first, then invalidate
"""

import json
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings
from src.em_common.redis_client import get_redis
from src.em_pricing.domain.models import PaymentInstructions

logger = logging.getLogger(__name__)

CACHE_KEY = "platform:payment_instructions"


class RedisPaymentInstructionsCache:
    """Cache misses on Redis errors; the DB stays authoritative."""

    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.SETTINGS_CACHE_TTL_SECONDS

    async def get(self) -> PaymentInstructions | None:
        try:
            redis = await self._redis_factory()
            raw = await redis.get(CACHE_KEY)
        except RedisError as e:
            logger.warning("settings cache read failed: %s", e)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("settings cache entry is not valid JSON, ignoring it")
            return None
        if not isinstance(data, dict):
            logger.warning("settings cache entry has unexpected shape, ignoring it")
            return None
        return PaymentInstructions(
            fps_number=data.get("fps_number"),
            payment_email=data.get("payment_email"),
            payment_methods=data.get("payment_methods"),
        )

    async def set(self, instructions: PaymentInstructions) -> None:
        payload = json.dumps({
            "fps_number": instructions.fps_number,
            "payment_email": instructions.payment_email,
            "payment_methods": instructions.payment_methods,
        })
        try:
            redis = await self._redis_factory()
            await redis.set(CACHE_KEY, payload, ex=self._ttl)
        except RedisError as e:
            logger.warning("settings cache write failed: %s", e)

    async def invalidate(self) -> None:
        try:
            redis = await self._redis_factory()
            await redis.delete(CACHE_KEY)
        except RedisError as e:
            # a stale entry expires on its own after the TTL
            logger.warning("settings cache invalidate failed: %s", e)
