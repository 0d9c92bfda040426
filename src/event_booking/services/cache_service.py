"""
Cache service for event read models

Writers bump a version key before deleting cached entries. Readers take
the version before querying the database and only fill the cache if it is
unchanged, so a read that raced a booking never repopulates a stale
seat count.
"""
from typing import Any, Dict, Optional

from event_booking.core.redis import RedisClient
import logging

logger = logging.getLogger(__name__)


class CacheService:
    """Manages event cache keys and invalidation"""

    # Cache key patterns
    EVENT_KEY = "event:{event_id}"
    EVENT_VERSION_KEY = "event:{event_id}:version"
    EVENTS_LIST_KEY = "events:list:page:{page}:size:{size}"
    EVENTS_LIST_VERSION_KEY = "events:version"
    EVENTS_LIST_PATTERN = "events:list:*"

    def __init__(self, redis_client: RedisClient, ttl: int = 300):
        self.redis = redis_client
        self.ttl = ttl

    async def get_event(self, event_id: int) -> Optional[Dict[str, Any]]:
        """Get cached event"""
        key = self.EVENT_KEY.format(event_id=event_id)
        cached = await self.redis.get(key)
        if cached:
            logger.debug(f"Cache HIT: {key}")
        return cached

    async def event_version(self, event_id: int) -> int:
        return int(await self.redis.get(self.EVENT_VERSION_KEY.format(event_id=event_id)) or 0)

    async def set_event(self, event_id: int, data: Dict[str, Any], version: int) -> bool:
        """Cache event data read at ``version``"""
        return await self.redis.set_if_version(
            self.EVENT_KEY.format(event_id=event_id),
            data,
            self.EVENT_VERSION_KEY.format(event_id=event_id),
            version,
            ttl=self.ttl,
        )

    async def get_event_list(self, page: int, size: int) -> Optional[Dict[str, Any]]:
        key = self.EVENTS_LIST_KEY.format(page=page, size=size)
        return await self.redis.get(key)

    async def event_list_version(self) -> int:
        return int(await self.redis.get(self.EVENTS_LIST_VERSION_KEY) or 0)

    async def set_event_list(self, page: int, size: int, data: Dict[str, Any], version: int) -> bool:
        return await self.redis.set_if_version(
            self.EVENTS_LIST_KEY.format(page=page, size=size),
            data,
            self.EVENTS_LIST_VERSION_KEY,
            version,
            ttl=self.ttl,
        )

    async def invalidate_event(self, event_id: int) -> None:
        """
        Invalidate every cached view that shows this event's availability.

        Bumps the event and list versions, then deletes event:{event_id}
        and all events:list:* pages.
        """
        logger.debug(f"Invalidating cache for event {event_id}")
        await self.redis.incr(self.EVENT_VERSION_KEY.format(event_id=event_id))
        await self.redis.incr(self.EVENTS_LIST_VERSION_KEY)
        await self.redis.delete(self.EVENT_KEY.format(event_id=event_id))
        await self.redis.delete_pattern(self.EVENTS_LIST_PATTERN)
