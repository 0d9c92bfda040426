"""
Redis client wrapper that degrades to a no-op when Redis is unreachable
"""
import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import WatchError

logger = logging.getLogger(__name__)


class CacheEncoder(json.JSONEncoder):
    """JSON encoder that handles Enums and Decimals"""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class RedisClient:
    """Async Redis client wrapper"""

    def __init__(self, url: str, default_ttl: int = 300):
        self.url = url
        self.default_ttl = default_ttl
        self.redis: Optional[redis.Redis] = None

    async def connect(self):
        """Connect to Redis; leaves the client disabled on failure"""
        try:
            self.redis = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=50,
            )
            await self.redis.ping()
            logger.info("Redis connected")
        except Exception as e:
            logger.warning(f"Redis unavailable, caching disabled: {e}")
            self.redis = None

    async def close(self):
        """Close Redis connection"""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis connection closed")

    @property
    def available(self) -> bool:
        return self.redis is not None

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if not self.redis:
            return None

        try:
            value = await self.redis.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set_if_version(
        self,
        key: str,
        value: Any,
        version_key: str,
        expected_version: int,
        ttl: Optional[int] = None,
    ) -> bool:
        """
        Set value only while version_key still holds expected_version.

        Uses WATCH/MULTI so a version bump between the check and the write
        aborts the write.
        """
        if not self.redis:
            return False

        try:
            serialized = json.dumps(value, cls=CacheEncoder, default=str)
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(version_key)
                current = await pipe.get(version_key)
                if int(current or 0) != expected_version:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.setex(key, ttl or self.default_ttl, serialized)
                await pipe.execute()
            return True
        except WatchError:
            return False
        except Exception as e:
            logger.error(f"Redis versioned SET error for key {key}: {e}")
            return False

    async def incr(self, key: str) -> Optional[int]:
        """Increment a counter key"""
        if not self.redis:
            return None

        try:
            return await self.redis.incr(key)
        except Exception as e:
            logger.error(f"Redis INCR error for key {key}: {e}")
            return None

    async def delete(self, *keys: str) -> bool:
        """Delete one or more keys"""
        if not self.redis:
            return False

        try:
            await self.redis.delete(*keys)
            return True
        except Exception as e:
            logger.error(f"Redis DELETE error: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern"""
        if not self.redis:
            return 0

        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
            if keys:
                return await self.redis.delete(*keys)
            return 0
        except Exception as e:
            logger.error(f"Redis DELETE_PATTERN error: {e}")
            return 0
