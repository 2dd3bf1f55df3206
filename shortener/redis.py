import logging
import redis.asyncio as redis
from typing import Optional

logger = logging.getLogger(__name__)

class RedisClient:
    def __init__(self):
        self.client: Optional[redis.Redis] = None

    async def connect(self, url: str):
        self.client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True
        )
        try:
            await self.client.ping()
        except redis.RedisError as e:
            # Cache and rate limiting degrade to no-ops without Redis
            logger.warning(f"Redis unavailable at startup, running without cache: {e}")
            await self.client.aclose()
            self.client = None

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def get(self, key: str) -> Optional[str]:
        if not self.client:
            return None
        try:
            return await self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis GET failed for {key}: {e}")
            return None

    async def set(self, key: str, value: str, ex: Optional[int] = None):
        if not self.client:
            return
        try:
            await self.client.set(key, value, ex=ex)
        except redis.RedisError as e:
            logger.error(f"Redis SET failed for {key}: {e}")

    async def delete(self, key: str):
        if not self.client:
            return
        try:
            await self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis DELETE failed for {key}: {e}")

def short_code_key(short_code: str) -> str:
    return f"short:{short_code}"

redis_client = RedisClient()
