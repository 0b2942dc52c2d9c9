from dataclasses import dataclass, field
from typing import Optional, Union

from redis.asyncio import Redis

from app.config.settings import config
from app.services.links import LinkRegistry, RedisLinkRegistry


def _memory_registry() -> LinkRegistry:
    return LinkRegistry(ttl_seconds=config.links.ttl_seconds, single_use=config.links.single_use)


@dataclass
class RuntimeState:
    """Centralized runtime state"""
    redis: Optional[Redis] = None
    link_registry: Union[LinkRegistry, RedisLinkRegistry] = field(default_factory=_memory_registry)
    ytdlp_version: str = "unknown"


state = RuntimeState()
