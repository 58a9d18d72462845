"""Forest Client lookup use cases behind the client endpoints."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from wastesearch.application.dtos.forest_client import (
    ClientAutocompleteResult,
    ClientRecord,
)
from wastesearch.application.dtos.search import CallerScope, CodeDescription
from wastesearch.core.constants import NO_LOCATION_NAME
from wastesearch.domain.exceptions import ResourceNotFoundException

if TYPE_CHECKING:
    from wastesearch.application.interfaces.repositories import IClientResolver

logger = logging.getLogger(__name__)

# Restricted callers filter autocomplete hits locally, so they fetch a wider page.
RESTRICTED_AUTOCOMPLETE_SIZE = 100


class ForestClientService:
    """Client detail, autocomplete, locations and batch lookup."""

    def __init__(self, resolver: "IClientResolver") -> None:
        self.resolver = resolver

    async def get_client(self, client_number: str) -> ClientRecord:
        """Return the client or raise ResourceNotFoundException."""
        record = await self.resolver.fetch_by_number(client_number)
        if record is None:
            raise ResourceNotFoundException("forest_client", client_number)
        return record

    async def autocomplete(
        self,
        value: str,
        page: int,
        size: int,
        caller: CallerScope,
    ) -> list[ClientAutocompleteResult]:
        """Clients matching value as name, acronym or number.

        Restricted callers only see their authorized clients, and nothing
        when they have none.
        """
        logger.info(
            "Searching forest clients by name, acronym or number (page %d, size %d)",
            page,
            size,
        )
        if not caller.unrestricted:
            if not caller.authorized_clients:
                return []
            size = RESTRICTED_AUTOCOMPLETE_SIZE

        found = await self.resolver.search_clients(value, page=page, size=size)
        return [
            ClientAutocompleteResult(id=c.client_number, name=c.name, acronym=c.acronym)
            for c in found.content
            if caller.unrestricted or c.client_number in caller.authorized_clients
        ]

    async def get_locations(self, client_number: str) -> list[CodeDescription]:
        """Location codes and names of the client (unnamed ones get a placeholder)."""
        locations = await self.resolver.fetch_locations(client_number)
        return [
            CodeDescription(loc.location_code, loc.location_name or NO_LOCATION_NAME)
            for loc in locations
        ]

    async def search_by_numbers(self, client_numbers: Sequence[str]) -> list[ClientRecord]:
        values = [n for n in client_numbers if n and n.strip()]
        if not values:
            return []
        return await self.resolver.search_by_numbers(values)
