from fastapi import Request, HTTPException
from redis.exceptions import RedisError
from typing import Optional
from ..config import get_settings
from ..redis import redis_client
from ..observability import RATE_LIMITED_TOTAL
import time
import logging

logger = logging.getLogger(__name__)

def client_key(request: Request, trust_forwarded: Optional[bool] = None) -> str:
    # X-Forwarded-For is client supplied unless a trusted proxy sets it
    if trust_forwarded is None:
        trust_forwarded = get_settings().TRUST_FORWARDED_FOR
    forwarded = request.headers.get("X-Forwarded-For") if trust_forwarded else None
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

class RateLimiter:
    def __init__(self, requests: int, window: int):
        self.requests = requests
        self.window = window

    async def __call__(self, request: Request):
        await check_rate_limit(
            client_key(request),
            self.requests,
            self.window,
            f"{request.method}:{request.url.path}",
        )

async def check_rate_limit(client_id: str, limit: int, window: int, key_prefix: str):
    if not redis_client.client:
        # Graceful degradation: Allow if Redis is down
        return

    try:
        # Simple Fixed Window
        current_window = int(time.time() / window)
        redis_key = f"rate:{client_id}:{key_prefix}:{current_window}"

        count = await redis_client.client.incr(redis_key)
        if count == 1:
            await redis_client.client.expire(redis_key, window)

        if count > limit:
            RATE_LIMITED_TOTAL.inc()
            raise HTTPException(status_code=429, detail="Rate limit exceeded")
    except RedisError as e:
        logger.error(f"Rate limiter error: {e}")
