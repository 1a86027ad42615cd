import redis.asyncio as redis
from typing import Optional, Dict, Any
import json
import logging

from agrosat.api.config import Settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "agrosat"


def create_redis_client(settings: Settings) -> redis.Redis:
    """Redis client for the configured URL; connects on first command"""
    return redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)


def weather_cache_key(lat: float, lon: float) -> str:
    """Weather is cached per 0.01° cell (about 1 km)"""
    return f"{KEY_PREFIX}:weather:{lat:.2f}:{lon:.2f}"


class CacheService:
    """
    JSON document cache on Redis

    Only dict payloads are stored. Redis errors propagate so callers can
    decide whether a cache miss is acceptable.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Dropping undecodable cache entry {key}")
            await self.client.delete(key)
            return None
        return value if isinstance(value, dict) else None

    async def set(self, key: str, value: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Store a document

        Args:
            key: Cache key
            value: JSON-serializable document
            ttl: Expiry in seconds; no expiry when omitted
        """
        payload = json.dumps(value, ensure_ascii=False)
        if ttl:
            return bool(await self.client.setex(key, ttl, payload))
        return bool(await self.client.set(key, payload))

    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self) -> None:
        await self.client.aclose()
