"""Thin Forest Client REST API adapter.

Raw calls only: every non-2xx answer becomes a typed upstream exception
and retry, breaker and fallback are layered on top by ClientResolver.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx

from wastesearch.application.dtos.forest_client import (
    ClientLocationRecord,
    ClientRecord,
)
from wastesearch.core.config import Settings
from wastesearch.core.constants import X_API_KEY, X_TOTAL_COUNT
from wastesearch.infrastructure.exceptions import (
    UpstreamNotFoundException,
    UpstreamRateLimitedException,
    UpstreamRequestException,
    UpstreamUnavailableException,
)
from wastesearch.infrastructure.external.forest_client.resilience import (
    parse_retry_after,
)

logger = logging.getLogger(__name__)

QueryParams = list[tuple[str, str | int]]

R = TypeVar("R")

# Errors a registry record parser raises on an unexpected body.
_PARSE_ERRORS = (TypeError, ValueError, AttributeError, KeyError)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared AsyncClient for the Forest Client API (closed at shutdown)."""
    headers = {"Accept": "application/json"}
    api_key = settings.forest_client_api_key.get_secret_value()
    if api_key:
        headers[X_API_KEY] = api_key
    return httpx.AsyncClient(
        base_url=settings.forest_client_api_url.rstrip("/"),
        headers=headers,
        timeout=httpx.Timeout(settings.forest_client_timeout_seconds),
    )


def _total_count(resp: httpx.Response, fallback: int) -> int:
    raw = resp.headers.get(X_TOTAL_COUNT)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s header: %r", X_TOTAL_COUNT, raw)
        return fallback


class ForestClientApi:
    """Forest Client registry endpoints used by the search."""

    def __init__(self, http_client: httpx.AsyncClient, locations_page_size: int = 100):
        self._http = http_client
        self._locations_page_size = locations_page_size

    async def _get(
        self,
        operation: str,
        path: str,
        params: QueryParams | None = None,
        resource_id: str | None = None,
    ) -> httpx.Response:
        """GET path and map the status to a typed exception.

        404 -> UpstreamNotFoundException, 429 -> UpstreamRateLimitedException,
        other 4xx -> UpstreamRequestException, 5xx and transport failures ->
        UpstreamUnavailableException.
        """
        logger.info("Starting Forest Client request %s to %s", operation, path)
        try:
            resp = await self._http.get(path, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableException(operation, "timeout") from e
        except httpx.TransportError as e:
            raise UpstreamUnavailableException(operation, type(e).__name__) from e

        status = resp.status_code
        if status == 404:
            logger.info("Forest Client %s returned 404 for %s", operation, resource_id)
            raise UpstreamNotFoundException(operation, resource_id)
        if status == 429:
            retry_after = parse_retry_after(resp.headers.get("Retry-After"))
            logger.warning(
                "Forest Client rate limit hit during %s (retry after %s)",
                operation,
                retry_after,
            )
            raise UpstreamRateLimitedException(operation, retry_after)
        if 400 <= status < 500:
            logger.error("Forest Client %s rejected with status %d", operation, status)
            raise UpstreamRequestException(operation, status)
        if status >= 500:
            logger.error("Forest Client %s failed with status %d", operation, status)
            raise UpstreamUnavailableException(operation, resp.reason_phrase, status)
        return resp

    @staticmethod
    def _json(operation: str, resp: httpx.Response) -> Any:
        raw = resp.content
        if not raw:
            return None
        try:
            return json.loads(raw.decode())
        except (UnicodeDecodeError, ValueError) as e:
            raise UpstreamUnavailableException(operation, "malformed response body") from e

    @staticmethod
    def _parse_one(operation: str, payload: Any, parse: Callable[[dict[str, Any]], R]) -> R:
        """Parse a JSON object with parse; any other shape is a malformed body."""
        if not isinstance(payload, dict):
            raise UpstreamUnavailableException(operation, "malformed response body")
        try:
            return parse(payload)
        except _PARSE_ERRORS as e:
            logger.error("Forest Client %s returned an unreadable record: %s", operation, e)
            raise UpstreamUnavailableException(operation, "malformed response body") from e

    @classmethod
    def _parse_many(
        cls, operation: str, payload: Any, parse: Callable[[dict[str, Any]], R]
    ) -> list[R]:
        """Parse a JSON list of objects; an empty body is an empty list."""
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise UpstreamUnavailableException(operation, "malformed response body")
        return [cls._parse_one(operation, item, parse) for item in payload]

    async def find_by_number(self, client_number: str) -> ClientRecord:
        """GET /clients/findByClientNumber/{number}."""
        op = "fetch_by_number"
        resp = await self._get(
            op, f"/clients/findByClientNumber/{client_number}", resource_id=client_number
        )
        payload = self._json(op, resp)
        if payload is None:
            raise UpstreamNotFoundException(op, client_number)
        return self._parse_one(op, payload, ClientRecord.from_api)

    async def find_locations(self, client_number: str) -> list[ClientLocationRecord]:
        """GET /clients/{number}/locations (first page, locations_page_size wide)."""
        op = "fetch_locations"
        resp = await self._get(
            op,
            f"/clients/{client_number}/locations",
            params=[("page", 0), ("size", self._locations_page_size)],
            resource_id=client_number,
        )
        return self._parse_many(op, self._json(op, resp), ClientLocationRecord.from_api)

    async def search_by_numbers(
        self,
        client_numbers: Sequence[str],
        name: str | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> list[ClientRecord]:
        """GET /clients/search?id=..&id=..[&name=..] (one call for all numbers)."""
        op = "search_by_numbers"
        ids = [n for n in client_numbers if n and n.strip()]
        params: QueryParams = [("page", page), ("size", size or max(len(ids), 1))]
        params.extend(("id", n) for n in ids)
        if name is not None:
            params.append(("name", name))
        resp = await self._get(op, "/clients/search", params=params)
        return self._parse_many(op, self._json(op, resp), ClientRecord.from_api)

    async def search_by_value(
        self, value: str, page: int = 0, size: int = 10
    ) -> tuple[list[ClientRecord], int]:
        """GET /clients/search/by matching value as name, acronym or number.

        Returns the page content and the X-Total-Count total.
        """
        op = "search_clients"
        params: QueryParams = [
            ("page", page),
            ("size", size),
            ("name", value),
            ("acronym", value),
            ("number", value),
        ]
        resp = await self._get(op, "/clients/search/by", params=params)
        content = self._parse_many(op, self._json(op, resp), ClientRecord.from_api)
        return content, _total_count(resp, len(content))
