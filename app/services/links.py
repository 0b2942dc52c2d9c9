import asyncio
import json
import logging
import secrets
import time
from contextlib import suppress
from typing import Callable, Dict, Optional

from redis.asyncio import Redis

from app.models.internal import LinkEntry
from app.utils.exceptions import HandleNotFound

logger = logging.getLogger(__name__)

HANDLE_BYTES = 16
REDIS_PREFIX = "link:"


def new_handle() -> str:
    return secrets.token_urlsafe(HANDLE_BYTES)


class LinkRegistry:
    """
    Expiring handle -> (media URL, filename) map for deferred proxy downloads.

    Expiry is checked on every resolve, so a handle is unusable as soon as its
    TTL elapses; the sweeper only reclaims memory.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        single_use: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.single_use = single_use
        self._clock = clock
        self._entries: Dict[str, LinkEntry] = {}
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._entries)

    async def register(self, media_url: str, filename: str) -> str:
        async with self._lock:
            handle = new_handle()
            while handle in self._entries:
                handle = new_handle()
            now = self._clock()
            self._entries[handle] = LinkEntry(
                handle=handle,
                media_url=media_url,
                filename=filename,
                created_at=now,
                expires_at=now + self.ttl_seconds,
            )
        return handle

    async def resolve(self, handle: str) -> LinkEntry:
        async with self._lock:
            entry = self._entries.get(handle)
            if entry is None:
                raise HandleNotFound(f"Unknown link {handle!r}")
            if self._clock() >= entry.expires_at:
                del self._entries[handle]
                raise HandleNotFound(f"Expired link {handle!r}")
            if self.single_use:
                del self._entries[handle]
            return entry

    async def evict(self, handle: str) -> bool:
        async with self._lock:
            return self._entries.pop(handle, None) is not None

    async def purge_expired(self) -> int:
        """Drop expired entries, return how many were removed"""
        async with self._lock:
            now = self._clock()
            expired = [h for h, e in self._entries.items() if now >= e.expires_at]
            for handle in expired:
                del self._entries[handle]
        if expired:
            logger.debug(f"Purged {len(expired)} expired links")
        return len(expired)

    def start(self, interval: float) -> None:
        """Start the background sweeper on the running loop"""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep(interval))

    async def stop(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None

    async def _sweep(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.purge_expired()


class RedisLinkRegistry:
    """
    Same contract backed by Redis keys with native expiry, so handles are
    shared between worker processes. SET NX guards against id collisions and
    GETDEL makes single-use resolution atomic.
    """

    def __init__(self, redis: Redis, ttl_seconds: int = 300, single_use: bool = False):
        self.redis = redis
        self.ttl_seconds = int(ttl_seconds)
        self.single_use = single_use

    async def register(self, media_url: str, filename: str) -> str:
        now = time.time()
        while True:
            handle = new_handle()
            payload = json.dumps({
                "media_url": media_url,
                "filename": filename,
                "created_at": now,
                "expires_at": now + self.ttl_seconds,
            })
            if await self.redis.set(REDIS_PREFIX + handle, payload, ex=self.ttl_seconds, nx=True):
                return handle

    async def resolve(self, handle: str) -> LinkEntry:
        key = REDIS_PREFIX + handle
        raw = await (self.redis.getdel(key) if self.single_use else self.redis.get(key))
        if raw is None:
            raise HandleNotFound(f"Unknown or expired link {handle!r}")
        data = json.loads(raw)
        return LinkEntry(handle=handle, **data)

    async def evict(self, handle: str) -> bool:
        return bool(await self.redis.delete(REDIS_PREFIX + handle))

    def start(self, interval: float) -> None:
        """Redis expires keys itself"""

    async def stop(self) -> None:
        pass
