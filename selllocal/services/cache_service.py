"""
Storefront category cache.

Each seller's distinct category lists live in one Redis hash,
``{prefix}:seller:{seller_id}:categories``, with a field per scope
(``active`` for the public storefront, ``all`` for the seller dashboard).
Any product write drops the whole hash with a single DEL.

Redis is optional: when it is disabled or unreachable every read falls
through to the database loader and invalidation does nothing.
"""
import json
import logging
from typing import Callable, List, Optional

import redis
from flask import Flask, current_app
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

SCOPES = ('active', 'all')
HEALTH_KEY = 'health'


class CategoryCache:
    """Per-seller category lists backed by a Redis hash."""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = 'selllocal', ttl: int = 300):
        self.client = client
        self.prefix = prefix
        self.ttl = ttl

    @classmethod
    def from_app(cls, app: Flask) -> 'CategoryCache':
        prefix = app.config.get('CACHE_KEY_PREFIX', 'selllocal')
        ttl = app.config.get('CACHE_CATEGORIES_TTL', 300)
        if not app.config.get('CACHE_ENABLED', True):
            logger.info("[CACHE] Category cache disabled via config")
            return cls(None, prefix, ttl)

        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                retry_on_timeout=True,
                health_check_interval=30
            )
            client.ping()
        except RedisError as e:
            logger.warning(f"[CACHE] Redis unreachable at {redis_url}: {e}. Serving categories from the database.")
            return cls(None, prefix, ttl)

        logger.info(f"[CACHE] Category cache connected: {redis_url}")
        return cls(client, prefix, ttl)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def key(self, seller_id: int) -> str:
        return f"{self.prefix}:seller:{seller_id}:categories"

    def fetch(self, seller_id: int, scope: str, loader: Callable[[], List[str]]) -> List[str]:
        """Cached category list for a scope, loading and storing it on a miss."""
        if scope not in SCOPES:
            raise ValueError(f"Unknown category scope: {scope}")
        if not self.enabled:
            return loader()

        key = self.key(seller_id)
        try:
            cached = self.client.hget(key, scope)
            if cached is not None:
                return json.loads(cached)
        except (RedisError, ValueError) as e:
            logger.warning(f"[CACHE] Category read failed for seller {seller_id}: {e}")
            return loader()

        categories = loader()
        try:
            pipeline = self.client.pipeline()
            pipeline.hset(key, scope, json.dumps(categories))
            pipeline.expire(key, self.ttl)
            pipeline.execute()
        except RedisError as e:
            logger.warning(f"[CACHE] Category write failed for seller {seller_id}: {e}")
        return categories

    def invalidate(self, seller_id: int) -> bool:
        """Forget both category scopes of a seller."""
        if not self.enabled:
            return False
        try:
            removed = self.client.delete(self.key(seller_id))
        except RedisError as e:
            logger.warning(f"[CACHE] Category invalidation failed for seller {seller_id}: {e}")
            return False
        if removed:
            logger.info(f"[CACHE] Categories invalidated for seller {seller_id}")
        return bool(removed)

    def round_trip(self) -> bool:
        """Write and read back a short-lived key."""
        if not self.enabled:
            return False
        key = f"{self.prefix}:{HEALTH_KEY}"
        try:
            self.client.setex(key, 10, 'ok')
            return self.client.get(key) == 'ok'
        except RedisError as e:
            logger.warning(f"[CACHE] Health round trip failed: {e}")
            return False


def init_cache(app: Flask) -> None:
    app.extensions['category_cache'] = CategoryCache.from_app(app)


def get_category_cache() -> CategoryCache:
    return current_app.extensions['category_cache']
