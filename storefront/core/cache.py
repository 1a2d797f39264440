"""
Redis-backed read-through cache with pattern invalidation.

Cache failures are logged and never fail the calling request: on any Redis
error the loader is invoked directly.
"""

import hashlib
import json
from typing import Any, Awaitable, Callable, Dict, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from storefront.core.config import config
from storefront.core.logger import logger


class CacheHelper:
    """Read-through cache helper keyed by prefix and parameters"""

    def __init__(self, client: Optional[aioredis.Redis] = None, ttl: int = None, enabled: bool = None):
        self._client = client
        self.ttl = ttl if ttl is not None else config.cache_ttl
        self.enabled = config.cache_enabled if enabled is None else enabled

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(config.redis_url, encoding="utf-8", decode_responses=True)
        return self._client

    @staticmethod
    def key(prefix: str, params: Dict[str, Any] = None) -> str:
        """
        Build a cache key from a prefix and parameters.

        Nested values (dicts, lists) are hashed so that keys stay short and stable.
        """
        key = prefix
        for name, value in (params or {}).items():
            if isinstance(value, (dict, list, tuple)):
                encoded = json.dumps(value, sort_keys=True, default=str)
                value = hashlib.md5(encoded.encode("utf-8")).hexdigest()
            key += f"_{name}_{value}"
        return key

    async def remember(self, key: str, loader: Callable[[], Awaitable[Any]], ttl: int = None) -> Any:
        """
        Return the cached value for `key`, or call `loader`, cache and return its result.

        `loader` must return JSON-serializable data. None results are not cached.
        """
        if not self.enabled:
            return await loader()

        try:
            cached = await self.client.get(key)
            if cached is not None:
                logger.debug("Cache hit", metadata={"event": "cache_hit", "key": key})
                return json.loads(cached)
        except (RedisError, OSError, ValueError) as e:
            logger.warning(f"Cache read failed for {key}: {e}", metadata={"event": "cache_read_error", "key": key})
            return await loader()

        value = await loader()
        if value is None:
            return value

        try:
            await self.client.set(key, json.dumps(value, default=str), ex=ttl or self.ttl)
        except (RedisError, OSError, TypeError) as e:
            logger.warning(f"Cache write failed for {key}: {e}", metadata={"event": "cache_write_error", "key": key})

        return value

    async def clear(self, pattern: str) -> int:
        """Delete every key matching a glob-style pattern"""
        if not self.enabled:
            return 0

        deleted = 0
        try:
            keys = [key async for key in self.client.scan_iter(match=pattern)]
            if keys:
                deleted = await self.client.delete(*keys)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache clear failed for {pattern}: {e}", metadata={"event": "cache_clear_error", "pattern": pattern})
            return 0

        logger.debug("Cache cleared", metadata={"event": "cache_clear", "pattern": pattern, "deleted": deleted})
        return deleted

    async def clear_item(self, prefix: str, identifier: Any) -> None:
        """Clear cached entries for a single item"""
        await self.clear(f"{prefix}show*{identifier}*")
        await self.clear(f"{prefix}public_show*{identifier}*")
        await self.clear(f"{prefix}*{identifier}*")

    async def clear_listing(self, prefix: str) -> None:
        """Clear cached listing pages"""
        await self.clear(f"{prefix}index*")
        await self.clear(f"{prefix}public_index*")
        await self.clear(f"{prefix}list*")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


cache = CacheHelper()
