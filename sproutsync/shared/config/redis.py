# 📄 File: sproutsync/shared/config/redis.py
#
# 🧭 Purpose (Layman Explanation):
# Configuration for Redis, the small fast store our background workers share so they
# all agree on things like whose turn it is in the reminder rotation.
#
# 🧪 Purpose (Technical Summary):
# Redis configuration with environment-specific socket settings and a client factory
# for the asyncio clients used by the reminder workers.
#
# 🔗 Dependencies:
# - redis Python package (redis.asyncio)
# - sproutsync.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.modules.notification_communication.infrastructure.scheduler_state

from typing import Any, Dict

import redis.asyncio as redis
from redis.asyncio import Redis

from .settings import get_settings

settings = get_settings()


# =============================================================================
# REDIS CONFIGURATION CLASS
# =============================================================================

class RedisConfig:
    """Redis configuration class with connection management."""

    def __init__(self):
        self.settings = settings

    @property
    def redis_url(self) -> str:
        """Get Redis connection URL."""
        return self.settings.redis_url

    @property
    def connection_kwargs(self) -> Dict[str, Any]:
        """Get Redis connection configuration."""

        base_config = {
            "encoding": "utf-8",
            "decode_responses": True,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }

        # Environment-specific configurations
        if self.settings.is_production:
            base_config.update({
                "socket_timeout": 5.0,
                "socket_connect_timeout": 5.0,
                "socket_keepalive": True,
            })
        elif self.settings.is_development:
            base_config.update({
                "socket_timeout": 10.0,
                "socket_connect_timeout": 10.0,
            })

        return base_config

    def create_redis_client(self) -> Redis:
        """
        Create a Redis client bound to the caller's event loop.

        Celery tasks run each cycle under a fresh ``asyncio.run``, so clients are never
        cached at module level; the caller closes the client when the cycle ends.
        """
        return redis.from_url(
            self.redis_url,
            max_connections=self.settings.REDIS_MAX_CONNECTIONS,
            **self.connection_kwargs
        )


# =============================================================================
# GLOBAL REDIS CONFIGURATION INSTANCE
# =============================================================================

redis_config = RedisConfig()


def create_redis_client() -> Redis:
    """Get a new Redis client using the application settings."""
    return redis_config.create_redis_client()
