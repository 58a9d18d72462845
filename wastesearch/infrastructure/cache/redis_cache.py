"""Redis-backed cache for the last good Forest Client lookups.

The resolver writes every successful lookup here and reads it back only
when the upstream is failing, so a Redis outage never fails a search:
every operation degrades to a miss.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from wastesearch.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

R = TypeVar("R")


class CacheService:
    """Async Redis cache with TTL support.

    Call connect() at startup and disconnect() at shutdown. Values are
    stored as JSON.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings (defaults to get_settings()).
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. A failure leaves the cache disabled."""
        if self.redis is not None:
            return
        password = self.settings.redis_password
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=password.get_secret_value() if password else None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError as e:
                logger.debug("Ignoring error while closing stale Redis client: %s", e)
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def _run(
        self, op: str, key: str, call: Callable[[redis.Redis], Awaitable[R]], default: R
    ) -> R:
        """Run call against Redis, reconnecting once on a connection error."""
        if not self.is_available() or self.redis is None:
            return default
        try:
            return await call(self.redis)
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect() and self.redis is not None:
                try:
                    return await call(self.redis)
                except redis.RedisError:
                    logger.exception("Cache %s error for key %s after reconnect", op, key)
                    return default
            logger.warning("Cache %s unavailable for key %s (Redis disconnected)", op, key)
            return default
        except redis.RedisError:
            logger.exception("Cache %s error for key %s", op, key)
            return default

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable."""

        async def _get(client: redis.Redis) -> Any | None:
            value = await client.get(key)
            if value is None:
                logger.debug("Cache MISS: %s", key)
                return None
            logger.debug("Cache HIT: %s", key)
            return json.loads(value)

        return await self._run("get", key, _get, None)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL (seconds; defaults to cache_ttl_clients)."""
        serialized = json.dumps(value)
        expiry = ttl if ttl is not None else self.settings.cache_ttl_clients

        async def _set(client: redis.Redis) -> bool:
            await client.setex(key, expiry, serialized)
            logger.debug("Cache SET: %s (TTL: %ss)", key, expiry)
            return True

        return await self._run("set", key, _set, False)
