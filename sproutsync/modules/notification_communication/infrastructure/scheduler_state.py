# 📄 File: sproutsync/modules/notification_communication/infrastructure/scheduler_state.py
# 🧭 Purpose (Layman Explanation):
# The reminder robot's notepad: which round of reminders it is on, and a "busy" sign so two
# robots never send the same round at once.
#
# 🧪 Purpose (Technical Summary):
# SchedulerStateStore abstraction for the round-robin notification index and the
# in-progress guard, with a Redis implementation (INCR counter + tokened SET NX EX lock) shared by
# Celery workers and an in-memory implementation for tests and single-process use.
#
# 🔗 Dependencies:
# - redis.asyncio
# - sproutsync.shared.config.redis (client factory)
#
# 🔄 Connected Modules / Calls From:
# - notification_communication.domain.services.notification_scheduler
# - background_jobs.tasks.care_reminders

import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

from redis.asyncio import Redis

from sproutsync.shared.config.redis import create_redis_client

logger = logging.getLogger(__name__)

INDEX_KEY = "sproutsync:notifications:index"
LOCK_KEY = "sproutsync:notifications:in_progress"
DEFAULT_LOCK_TTL_SECONDS = 300

# Delete the lock only while it still holds the caller's token
RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class SchedulerStateStore(ABC):
    """Shared state for the overdue-notification scheduler."""

    @abstractmethod
    async def get_index(self) -> int:
        pass

    @abstractmethod
    async def increment_index(self) -> int:
        """Advance the round-robin index and return the new value."""
        pass

    @abstractmethod
    async def reset_index(self) -> None:
        pass

    @abstractmethod
    async def acquire_lock(self, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
        """Take the in-progress guard; False if a cycle already holds it."""
        pass

    @abstractmethod
    async def release_lock(self) -> None:
        pass

    @abstractmethod
    async def is_locked(self) -> bool:
        pass

    async def close(self) -> None:
        """Release any connections held by the store."""


class InMemorySchedulerStateStore(SchedulerStateStore):
    """Process-local state."""

    def __init__(self):
        self.index = 0
        self.locked = False

    async def get_index(self) -> int:
        return self.index

    async def increment_index(self) -> int:
        self.index += 1
        return self.index

    async def reset_index(self) -> None:
        self.index = 0

    async def acquire_lock(self, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
        if self.locked:
            return False
        self.locked = True
        return True

    async def release_lock(self) -> None:
        self.locked = False

    async def is_locked(self) -> bool:
        return self.locked


class RedisSchedulerStateStore(SchedulerStateStore):
    """
    Redis-backed state shared by every worker.

    The lock expires after ``ttl_seconds`` so a crashed worker cannot block reminders forever.
    Each acquire stores a fresh token and release only deletes the key while it still holds
    that token, so a cycle that outlived its TTL cannot free a lock taken by the next one.
    """

    def __init__(self, client: Redis, owns_client: bool = False):
        self.client = client
        self.owns_client = owns_client
        self._lock_token: Optional[str] = None
        self._release_script = client.register_script(RELEASE_LOCK_SCRIPT)

    @classmethod
    def from_settings(cls) -> "RedisSchedulerStateStore":
        """Store with its own connection, closed by close()."""
        return cls(create_redis_client(), owns_client=True)

    async def get_index(self) -> int:
        value: Optional[str] = await self.client.get(INDEX_KEY)
        return int(value) if value else 0

    async def increment_index(self) -> int:
        return int(await self.client.incr(INDEX_KEY))

    async def reset_index(self) -> None:
        await self.client.set(INDEX_KEY, 0)

    async def acquire_lock(self, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
        token = uuid4().hex
        acquired = await self.client.set(LOCK_KEY, token, nx=True, ex=ttl_seconds)
        if acquired:
            self._lock_token = token
        return bool(acquired)

    async def release_lock(self) -> None:
        if self._lock_token is None:
            return
        released = await self._release_script(keys=[LOCK_KEY], args=[self._lock_token])
        if not released:
            logger.warning("⚠️ Notification lock expired before release; it now belongs to another cycle")
        self._lock_token = None

    async def is_locked(self) -> bool:
        return bool(await self.client.exists(LOCK_KEY))

    async def close(self) -> None:
        if self.owns_client:
            await self.client.aclose()
