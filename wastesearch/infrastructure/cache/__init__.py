"""Cache layer: Redis CacheService, protocol, and key builders."""

from wastesearch.infrastructure.cache.cache_protocol import CacheProtocol
from wastesearch.infrastructure.cache.keys import client_key, client_locations_key
from wastesearch.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheProtocol", "CacheService", "client_key", "client_locations_key"]
