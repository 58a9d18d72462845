"""Resilient Forest Client lookups used by enrichment and the client endpoints.

Every call runs as retry.call(op, lambda: breaker.call(raw)). When the call
still fails (retries exhausted, open breaker, rate limit, rejected request)
the resolver serves the last good answer from the cache if there is one,
otherwise the typed empty value. Search never fails because the registry does.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from wastesearch.application.dtos.forest_client import (
    ClientLocationRecord,
    ClientRecord,
)
from wastesearch.application.dtos.search import Page, PageRequest
from wastesearch.domain.client_numbers import normalize_client_number
from wastesearch.infrastructure.cache.cache_protocol import CacheProtocol
from wastesearch.infrastructure.cache.keys import client_key, client_locations_key
from wastesearch.infrastructure.exceptions import (
    UpstreamException,
    UpstreamNotFoundException,
)
from wastesearch.infrastructure.external.forest_client.api import ForestClientApi
from wastesearch.infrastructure.external.forest_client.resilience import (
    CircuitBreaker,
    RetryPolicy,
)
from wastesearch.shared.telemetry import add_span_event, traced

logger = logging.getLogger(__name__)

R = TypeVar("R")

FOREST_CLIENT_BREAKER = "forest_client"


class ClientResolver:
    """IClientResolver over the Forest Client API with retry, breaker and fallback."""

    def __init__(
        self,
        api: ForestClientApi,
        retry: RetryPolicy,
        breaker: CircuitBreaker,
        cache: CacheProtocol | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        self._api = api
        self._retry = retry
        self._breaker = breaker
        self._cache = cache
        self._cache_ttl = cache_ttl

    async def _call(self, operation: str, fn: Callable[[], Awaitable[R]]) -> R:
        return await self._retry.call(operation, lambda: self._breaker.call(fn))

    def _cache_ready(self) -> bool:
        return self._cache is not None and self._cache.is_available()

    async def _remember(self, key: str, value: object) -> None:
        if self._cache_ready():
            await self._cache.set(key, value, self._cache_ttl)

    async def _recall(self, key: str) -> object | None:
        if self._cache_ready():
            return await self._cache.get(key)
        return None

    @staticmethod
    def _log_fallback(operation: str, exc: UpstreamException, cached: bool) -> None:
        logger.warning(
            "Forest Client %s fell back to %s: %s",
            operation,
            "cached value" if cached else "empty result",
            exc.message,
        )
        add_span_event("fallback", {"operation": operation, "cached": cached})

    @traced("forest_client.fetch_by_number")
    async def fetch_by_number(self, client_number: str) -> ClientRecord | None:
        """Return the client, or None when it does not exist or the registry is failing."""
        number = normalize_client_number(client_number)
        key = client_key(number)
        try:
            record = await self._call(
                "fetch_by_number", lambda: self._api.find_by_number(number)
            )
        except UpstreamNotFoundException:
            return None
        except UpstreamException as e:
            cached = await self._recall(key)
            self._log_fallback("fetch_by_number", e, cached is not None)
            return ClientRecord.from_cache(cached) if cached else None
        await self._remember(key, record.to_cache())
        return record

    @traced("forest_client.fetch_locations")
    async def fetch_locations(self, client_number: str) -> list[ClientLocationRecord]:
        """Return the client's locations; empty when unknown or on failure."""
        number = normalize_client_number(client_number)
        key = client_locations_key(number)
        try:
            locations = await self._call(
                "fetch_locations", lambda: self._api.find_locations(number)
            )
        except UpstreamNotFoundException:
            return []
        except UpstreamException as e:
            cached = await self._recall(key)
            self._log_fallback("fetch_locations", e, cached is not None)
            return [ClientLocationRecord.from_cache(item) for item in cached or []]
        await self._remember(key, [loc.to_cache() for loc in locations])
        return locations

    @traced("forest_client.search_by_numbers")
    async def search_by_numbers(
        self,
        client_numbers: Sequence[str],
        name: str | None = None,
    ) -> list[ClientRecord]:
        """Look up all client_numbers in one registry call.

        On failure, clients cached by earlier lookups are returned instead;
        a name filter disables the cached fallback.
        """
        numbers = list(dict.fromkeys(normalize_client_number(n) for n in client_numbers))
        if not numbers:
            return []
        try:
            records = await self._call(
                "search_by_numbers",
                lambda: self._api.search_by_numbers(numbers, name=name),
            )
        except UpstreamNotFoundException:
            return []
        except UpstreamException as e:
            recovered: list[ClientRecord] = []
            if name is None:
                for number in numbers:
                    cached = await self._recall(client_key(number))
                    if cached:
                        recovered.append(ClientRecord.from_cache(cached))
            self._log_fallback("search_by_numbers", e, bool(recovered))
            return recovered
        for record in records:
            if record.client_number:
                await self._remember(client_key(record.client_number), record.to_cache())
        return records

    @traced("forest_client.search_clients")
    async def search_clients(
        self, value: str, page: int = 0, size: int = 10
    ) -> Page[ClientRecord]:
        """Autocomplete by name, acronym or number; empty page on failure."""
        request = PageRequest(page=page, size=size)
        try:
            content, total = await self._call(
                "search_clients",
                lambda: self._api.search_by_value(value, page=page, size=size),
            )
        except UpstreamNotFoundException:
            return Page.empty(request)
        except UpstreamException as e:
            self._log_fallback("search_clients", e, False)
            return Page.empty(request)
        content = content[:size]
        return Page(
            content=tuple(content),
            total_elements=max(total, request.offset + len(content) if content else 0),
            page_number=page,
            page_size=size,
        )
