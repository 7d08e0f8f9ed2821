"""Redis cache service for identity-provider lookups."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from staylink.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-backed JSON cache. Every operation degrades to a miss on error."""

    def __init__(self, url: str | None = None):
        self._url = url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def _get_redis(self) -> redis.Redis | None:
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    self._url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, cache disabled: {e}")
                self._redis = None
                return None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        try:
            r = await self._get_redis()
            if r is None:
                return None
            raw = await r.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception:
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.set(key, json.dumps(value, default=str), ex=ttl or settings.organization_cache_ttl)
            return True
        except Exception:
            return False

    async def delete(self, key: str) -> bool:
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.delete(key)
            return True
        except Exception:
            return False

    # Typed helpers

    def organization_key(self, org_id: str) -> str:
        return f"org:{org_id}"

    async def get_organization(self, org_id: str) -> dict | None:
        return await self.get(self.organization_key(org_id))

    async def set_organization(self, org_id: str, data: dict):
        await self.set(self.organization_key(org_id), data, settings.organization_cache_ttl)

    async def invalidate_organization(self, org_id: str):
        await self.delete(self.organization_key(org_id))

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None


cache_service = CacheService()
