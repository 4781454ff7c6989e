from __future__ import annotations

import hashlib
import logging

import redis
from fastapi import HTTPException, Request

from app.config import settings
from app.redis_client import redis_client

logger = logging.getLogger("mt-tasks.ratelimit")

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

# fixed-window limiter using redis INCR + EXPIRE
def rate_limit(name: str, limit_per_window: int, window_seconds: int):
    def _dep(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = (request.client.host if request.client else "unknown").strip()
        key = f"rl:{name}:{_hash(ip)}"

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()
        except redis.RedisError as e:
            # fail-open if redis is down
            logger.warning(f"rate limiter unavailable for {name}: {e}")
            return

        if int(count) > int(limit_per_window):
            raise HTTPException(status_code=429, detail="Too many requests")

    return _dep
