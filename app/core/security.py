import asyncio
import ipaddress
import logging
import socket
from enum import Enum, auto
from typing import Union
from urllib.parse import urlparse

from redis.exceptions import RedisError

from app.config.settings import config
from app.infra.redis import get_redis
from app.utils.hash import hash_stable

logger = logging.getLogger(__name__)

SSRF_CACHE_TTL = 300


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    BLOCKED = auto()
    INVALID = auto()


def _is_blocked(ip: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    if ip.is_loopback:
        return not config.security.allow_localhost
    if ip.is_private:
        return not config.security.allow_private_ips
    return ip.is_link_local or ip.is_multicast or ip.is_reserved or ip.is_unspecified


class SecurityValidator:
    """
    Guard the raw-URL proxy against SSRF: only http(s) URLs whose host
    resolves to public addresses pass. Verdicts are cached in Redis.
    """

    @staticmethod
    async def validate_url(url: str) -> UrlValidationResult:
        try:
            parsed = urlparse(url)
        except ValueError:
            return UrlValidationResult.INVALID

        hostname = parsed.hostname
        if parsed.scheme not in ("http", "https") or not hostname:
            return UrlValidationResult.INVALID

        if not config.security.enable_ssrf_protection:
            return UrlValidationResult.OK

        redis = get_redis()
        cache_key = f"ssrf:{hash_stable(hostname)}"
        if redis:
            try:
                cached = await redis.get(cache_key)
            except RedisError as e:
                logger.warning(f"SSRF cache read failed: {e}")
                cached = None
            if cached == "ok":
                return UrlValidationResult.OK
            if cached == "blocked":
                return UrlValidationResult.BLOCKED

        try:
            addr_info = await asyncio.to_thread(socket.getaddrinfo, hostname, None)
        except (socket.gaierror, UnicodeError):
            return UrlValidationResult.INVALID

        is_blocked = any(
            _is_blocked(ipaddress.ip_address(info[4][0].split("%")[0]))
            for info in addr_info
        )

        if redis:
            try:
                await redis.setex(cache_key, SSRF_CACHE_TTL, "blocked" if is_blocked else "ok")
            except RedisError as e:
                logger.warning(f"SSRF cache write failed: {e}")

        return UrlValidationResult.BLOCKED if is_blocked else UrlValidationResult.OK
