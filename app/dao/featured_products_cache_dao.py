import json
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
import structlog

from app.core.config import settings
from app.core.redis import redis_client

logger = structlog.get_logger()


class FeaturedProductsCacheDAO:
    """Redis-backed snapshot of the featured products list.

    The entry is a JSON array of serialized products stored under a single key.
    It is never partially updated: callers either replace it or drop it.
    """

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        key: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._client = client if client is not None else redis_client
        self._key = key or settings.featured_cache_key
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.featured_cache_ttl_seconds

    @property
    def key(self) -> str:
        return self._key

    async def get(self) -> Optional[List[Dict[str, Any]]]:
        raw = await self._client.get(self._key)
        if not raw:
            return None
        return json.loads(raw)

    async def set(self, products: List[Dict[str, Any]]) -> None:
        payload = json.dumps(products)
        if self._ttl:
            await self._client.set(self._key, payload, ex=self._ttl)
        else:
            await self._client.set(self._key, payload)
        logger.info("Featured products cache written", key=self._key, count=len(products))

    async def delete(self) -> None:
        await self._client.delete(self._key)
        logger.info("Featured products cache dropped", key=self._key)


featured_products_cache_dao = FeaturedProductsCacheDAO()
