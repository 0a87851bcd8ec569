"""
Redis caching for upstream payloads (published sheet CSVs)
Fail-open: when Redis is unreachable every call is a miss
"""
import hashlib
import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client
    Supports REDIS_URL (Upstash / managed Redis) or host/port settings
    """
    global redis_client

    if redis_client is None:
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30,
            )
        else:
            redis_client = redis.Redis(
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", "6379")),
                password=os.getenv("REDIS_PASSWORD", None),
                db=int(os.getenv("REDIS_DB", "0")),
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        redis_client.ping()
        logger.info("Redis connected successfully")
    return redis_client


class Cache:
    """Redis cache wrapper for text payloads"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[str]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value is not None:
                logger.debug(f"✅ Cache HIT: {key}")
                return value
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: str, ttl: int = 300) -> bool:
        client = self._get_client()
        if not client or ttl <= 0:
            return False

        try:
            client.setex(key, ttl, value)
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False


# Global cache instance
cache = Cache()


def build_sheet_key(url: str) -> str:
    """Build cache key for a published sheet URL"""
    return f"sheet_csv:{hashlib.sha256(url.encode()).hexdigest()[:16]}"
