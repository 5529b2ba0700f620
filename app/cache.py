"""
Redis JSON cache used for webhook idempotency and admin statistics.
Every operation degrades to a miss when Redis is unavailable.
"""

import json
import logging
from typing import Any, Optional

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.debug(f"Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            return json.loads(value) if value else None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


cache = Cache()

ADMIN_STATS_KEY = "admin:user_stats"
SUBSCRIPTION_STATS_KEY = "admin:subscription_stats"


def invalidate_admin_stats() -> None:
    """Drop cached dashboard numbers after a write that changes them"""
    cache.delete(ADMIN_STATS_KEY)
    cache.delete(SUBSCRIPTION_STATS_KEY)
