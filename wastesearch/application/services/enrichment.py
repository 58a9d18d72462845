"""Resolve client and client-location names for a page of search results.

Network calls are bounded by distinct clients, never by rows: one batched
name lookup plus one locations lookup per distinct client, at most
max_concurrency in flight. Rows whose client does not resolve keep their
code with no description; row order is never changed.
"""

from __future__ import annotations

import asyncio
import logging

from wastesearch.application.dtos.forest_client import ClientLocationRecord
from wastesearch.application.dtos.search import (
    CodeDescription,
    Page,
    ReportingUnitResult,
)
from wastesearch.application.interfaces.repositories import IClientResolver
from wastesearch.shared.telemetry import add_span_attributes, traced

logger = logging.getLogger(__name__)


def location_key(client_number: str, location_code: str) -> str:
    return f"{client_number}-{location_code}"


class ReportingUnitEnricher:
    """Enrichment join over an IClientResolver."""

    def __init__(self, resolver: IClientResolver, max_concurrency: int = 5) -> None:
        self._resolver = resolver
        self._semaphore = asyncio.Semaphore(max(max_concurrency, 1))

    async def _client_names(self, client_numbers: list[str]) -> dict[str, str | None]:
        records = await self._resolver.search_by_numbers(client_numbers)
        return {record.client_number: record.name for record in records}

    async def _locations(self, client_number: str) -> list[ClientLocationRecord]:
        async with self._semaphore:
            return await self._resolver.fetch_locations(client_number)

    async def _location_names(self, client_numbers: list[str]) -> dict[str, str | None]:
        per_client = await asyncio.gather(*(self._locations(c) for c in client_numbers))
        names: dict[str, str | None] = {}
        for client_number, locations in zip(client_numbers, per_client):
            for location in locations:
                names[location_key(client_number, location.location_code)] = (
                    location.location_name
                )
        return names

    @traced("enrichment.enrich")
    async def enrich(self, page: Page[ReportingUnitResult]) -> Page[ReportingUnitResult]:
        """Return the page with client and location descriptions filled in.

        A cancellation while lookups are pending propagates; no partially
        enriched page is returned.
        """
        client_numbers = list(
            dict.fromkeys(row.client.code for row in page.content if row.client.code)
        )
        if not client_numbers:
            return page

        client_names, location_names = await asyncio.gather(
            self._client_names(client_numbers),
            self._location_names(client_numbers),
        )
        add_span_attributes(
            **{
                "enrichment.clients": len(client_numbers),
                "enrichment.resolved": len(client_names),
            }
        )
        if len(client_names) < len(client_numbers):
            logger.info(
                "Resolved %d of %d clients for the page",
                len(client_names),
                len(client_numbers),
            )

        def apply(row: ReportingUnitResult) -> ReportingUnitResult:
            code = row.client.code
            if not code:
                return row
            enriched = row.with_client(CodeDescription(code, client_names.get(code)))
            loc_code = row.client_location.code
            if loc_code:
                enriched = enriched.with_client_location(
                    CodeDescription(
                        loc_code, location_names.get(location_key(code, loc_code))
                    )
                )
            return enriched

        return page.map(apply)
