# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Redis read cache with TTL support."""

from __future__ import annotations

import json
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from attrs import field, frozen
from beartype import beartype

__all__ = [
    "Cache",
    "CacheConfig",
    "RedisType",
]

if TYPE_CHECKING:
    from redis.asyncio import Redis as RedisType
else:
    RedisType = redis.Redis


@frozen
class CacheConfig:
    """Immutable cache configuration."""

    url: str = field()
    default_ttl: int = field(default=3600)  # 1 hour
    max_connections: int = field(default=10)


class Cache:
    """Redis cache manager with async support.

    Accepts an already-created ``redis.asyncio.Redis`` client (tests pass a
    fakeredis instance); otherwise :py:meth:`connect` builds one from the URL.
    """

    def __init__(
        self,
        config: CacheConfig,
        redis_client: Any | None = None,
    ) -> None:
        """Create a cache wrapper."""
        self._config = config
        self._redis: Any | None = redis_client

    @beartype
    async def connect(self) -> None:
        """Create the Redis client."""
        if self._redis is not None:
            return

        self._redis = redis.from_url(
            self._config.url,
            max_connections=self._config.max_connections,
            decode_responses=True,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the Redis client."""
        if self._redis is None:
            return

        await self._redis.aclose()
        self._redis = None

    @property
    def is_connected(self) -> bool:
        """Check if cache is connected."""
        return self._redis is not None

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get a JSON value from cache."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        value = await self._redis.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    @beartype
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set a JSON value with optional TTL."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        if ttl is None:
            ttl = self._config.default_ttl
        if isinstance(ttl, int):
            ttl = timedelta(seconds=ttl)

        result = await self._redis.setex(key, ttl, json.dumps(value, default=str))
        return bool(result)

    @beartype
    async def delete(self, *keys: str) -> int:
        """Delete keys from cache and return how many existed."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")
        if not keys:
            return 0

        result = await self._redis.delete(*keys)
        return int(result)
