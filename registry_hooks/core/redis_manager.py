"""Redis client helpers."""
from __future__ import annotations

from redis.asyncio import Redis, from_url

from registry_hooks.core.config import get_settings


def create_redis_client(url: str, *, decode_responses: bool = False) -> Redis:
    """Return a configured Redis asyncio client instance."""
    
    kwargs = {
        "decode_responses": decode_responses,
        "health_check_interval": 30,
    }
    
    # Only include encoding parameter when decode_responses is True
    if decode_responses:
        kwargs["encoding"] = "utf-8"
    
    return from_url(url, **kwargs)


def get_redis_client(*, decode_responses: bool = False) -> Redis:
    """Return a Redis client configured from application settings.
    
    Redis backs Celery results; the API only talks to it for health checks.
    """
    settings = get_settings()
    return create_redis_client(settings.redis_url, decode_responses=decode_responses)
