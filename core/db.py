"""
Database Module - Supabase and Redis Clients

Provides singleton instances of:
- Async Supabase client for PostgreSQL operations (user and product tables)
- Upstash Redis client for rate limiting counters
"""

from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client
from upstash_redis.asyncio import Redis as AsyncRedis

from core.config import get_settings

_async_supabase_client: Optional[AsyncClient] = None
_redis_client: Optional[AsyncRedis] = None


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (singleton).

    Only used when STORE_BACKEND=supabase.
    """
    global _async_supabase_client

    if _async_supabase_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        _async_supabase_client = await acreate_client(
            settings.supabase_url, settings.supabase_service_role_key
        )

    return _async_supabase_client


def get_redis() -> Optional[AsyncRedis]:
    """
    Get async Upstash Redis client (singleton), or None when not configured.

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        if not settings.redis_configured:
            return None
        _redis_client = AsyncRedis(
            url=settings.upstash_redis_rest_url, token=settings.upstash_redis_rest_token
        )

    return _redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    RATE_LIMIT = "rate_limit:"  # rate_limit:{client_ip}:{path}

    @staticmethod
    def rate_limit_key(client_ip: str, path: str) -> str:
        return f"{RedisKeys.RATE_LIMIT}{client_ip}:{path}"


class TTL:
    """Time-to-live constants for Redis keys (seconds)."""

    RATE_LIMIT_WINDOW = 60
