"""
Redis-backed read-through cache for catalog listings.

When REDIS_URL is empty the cache is disabled: every get is a miss and
set/invalidate do nothing. Redis errors are logged and treated the same way,
the database stays the source of truth.
"""

import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 60


class RedisCache:
    def __init__(self, app=None):
        self.client: Optional[redis.Redis] = None
        self.default_ttl = DEFAULT_TTL_SEC
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        url = app.config.get("REDIS_URL")
        self.default_ttl = int(app.config.get("BOOKS_CACHE_TTL", DEFAULT_TTL_SEC))
        if url:
            self.client = redis.Redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=1,
                socket_timeout=1,
            )
            app.logger.info("[cache] Redis cache enabled")
        else:
            self.client = None
            app.logger.info("[cache] REDIS_URL not set, cache disabled")

        app.extensions["redis_cache"] = self

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get(self, key: str) -> Optional[Any]:
        if not self.client:
            return None
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning("[cache] get %s failed: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("[cache] corrupted entry for %s, ignoring", key)
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.client:
            return
        try:
            self.client.setex(key, ttl or self.default_ttl, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning("[cache] set %s failed: %s", key, e)

    def invalidate(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns the number of keys removed."""
        if not self.client:
            return 0
        try:
            keys = list(self.client.scan_iter(match=f"{prefix}*"))
            if keys:
                self.client.delete(*keys)
            return len(keys)
        except redis.RedisError as e:
            logger.warning("[cache] invalidate %s failed: %s", prefix, e)
            return 0
