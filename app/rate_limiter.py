"""
Rate limiting for webhook and cron endpoints.

Counts live in process memory and are mirrored to Redis at most every few
seconds, so several API workers converge on a shared count without a Redis
round trip per request.
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from .config import REDIS_ENABLED

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {"count": int, "reset_time": int, "last_redis_sync": int}}
memory_counters: dict[str, dict] = {}
counters_lock = Lock()

REDIS_SYNC_INTERVAL = 10


class RedisDisabledError(RuntimeError):
    pass


def get_redis_client() -> redis.Redis:
    """
    Get or create the shared Redis client.

    REDIS_URL wins over the REDIS_HOST/REDIS_PORT/REDIS_PASSWORD settings.
    """
    global redis_client

    if not REDIS_ENABLED:
        raise RedisDisabledError("Redis is disabled (REDIS_ENABLED=false)")

    if redis_client is None:
        redis_url = os.getenv("REDIS_URL")
        common = {
            "decode_responses": True,
            "socket_connect_timeout": 15,
            "socket_timeout": 30,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }
        try:
            if redis_url:
                client = redis.from_url(redis_url, **common)
            else:
                client = redis.Redis(
                    host=os.getenv("REDIS_HOST", "localhost"),
                    port=int(os.getenv("REDIS_PORT", "6379")),
                    password=os.getenv("REDIS_PASSWORD"),
                    db=int(os.getenv("REDIS_DB", "0")),
                    ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
                    **common,
                )
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise
        redis_client = client
        logger.info("✅ Redis connected successfully")

    return redis_client


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis]
) -> tuple[bool, int, int]:
    """
    Count one request against key.

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    now = int(time.time())

    with counters_lock:
        entry = memory_counters.get(key)
        if entry is None:
            entry = {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": now}
            if client is not None:
                try:
                    stored = client.get(key)
                    ttl = client.ttl(key)
                    if stored and ttl > 0:
                        entry = {"count": int(stored), "reset_time": now + ttl, "last_redis_sync": now}
                except redis.RedisError as e:
                    logger.warning(f"⚠️ Failed to load {key} from Redis, using memory only: {e}")
            memory_counters[key] = entry

        if now >= entry["reset_time"]:
            entry.update(count=0, reset_time=now + window_seconds, last_redis_sync=0)

        is_allowed = entry["count"] < limit
        if is_allowed:
            entry["count"] += 1

        if client is not None and now - entry["last_redis_sync"] >= REDIS_SYNC_INTERVAL:
            try:
                client.set(key, entry["count"], ex=window_seconds)
                entry["last_redis_sync"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

        return is_allowed, entry["count"], max(0, entry["reset_time"] - now)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
):
    if not REDIS_ENABLED:
        return

    try:
        client = get_redis_client()
    except Exception as e:
        logger.warning("🔒 Denying request, rate limiting backend unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e

    key = f"{key_prefix}:{_client_ip(request)}" if use_ip else f"{key_prefix}:global"
    is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, client)

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit}")
        raise HTTPException(
            status_code=429,
            detail={
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after": ttl,
                "limit": limit,
                "window_seconds": window_seconds,
            },
            headers={"Retry-After": str(ttl)},
        )


def create_rate_limiter(
    limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True
):
    """
    Build a rate limiting dependency.

        webhook_limit = create_rate_limiter(limit=100, window_seconds=60, key_prefix="stripe_webhook")

        @router.post("/webhooks/stripe")
        async def stripe_webhook(request: Request, _: None = Depends(webhook_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, use_ip)

    return rate_limiter
