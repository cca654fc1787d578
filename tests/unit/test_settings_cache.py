"""RedisPaymentInstructionsCache with a mocked redis client."""

from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from src.em_pricing.domain.models import PaymentInstructions
from src.em_pricing.infrastructure.cache import CACHE_KEY, RedisPaymentInstructionsCache


def _cache(redis: AsyncMock) -> RedisPaymentInstructionsCache:
    return RedisPaymentInstructionsCache(redis_factory=AsyncMock(return_value=redis), ttl_seconds=30)


async def test_round_trip_through_json() -> None:
    redis = AsyncMock()
    cache = _cache(redis)
    await cache.set(PaymentInstructions("123", "pay@x.io", "FPS, PayMe"))

    key, payload = redis.set.call_args[0]
    assert key == CACHE_KEY
    assert redis.set.call_args[1] == {"ex": 30}

    redis.get = AsyncMock(return_value=payload)
    assert await cache.get() == PaymentInstructions("123", "pay@x.io", "FPS, PayMe")


async def test_miss_returns_none() -> None:
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    assert await _cache(redis).get() is None


async def test_redis_errors_degrade_to_miss() -> None:
    redis = AsyncMock()
    redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
    redis.delete = AsyncMock(side_effect=RedisConnectionError("down"))
    cache = _cache(redis)
    assert await cache.get() is None
    await cache.invalidate()


async def test_invalidate_deletes_key() -> None:
    redis = AsyncMock()
    await _cache(redis).invalidate()
    redis.delete.assert_awaited_once_with(CACHE_KEY)


async def test_corrupt_entry_is_a_miss() -> None:
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=b"{not json")
    assert await _cache(redis).get() is None


async def test_non_object_entry_is_a_miss() -> None:
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=b"[1, 2]")
    assert await _cache(redis).get() is None
