"""Repository and upstream interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wastesearch.application.dtos.forest_client import (
        ClientLocationRecord,
        ClientRecord,
    )
    from wastesearch.application.dtos.search import (
        CodeDescription,
        Page,
        PageRequest,
        ReportingUnitRow,
        ResolvedOrder,
        SearchFilter,
    )


class IReportingUnitRepository(Protocol):
    """Protocol for the reporting-unit query executor (DIP)."""

    async def search(
        self,
        search_filter: SearchFilter,
        orders: Sequence[ResolvedOrder],
        page: PageRequest,
    ) -> tuple[list[ReportingUnitRow], int]:
        """Return one page of matching rows and the total match count."""

    async def search_users(
        self, user_id: str, client_numbers: Sequence[str], limit: int
    ) -> list[str]:
        """User ids on reporting units of the given clients that contain user_id."""


class ICodesRepository(Protocol):
    """Protocol for the code tables behind the search selectors."""

    async def districts(self, codes: Sequence[str]) -> list[CodeDescription]:
        """Org units with the given codes (NOVALUE for all), ordered by code."""

    async def sampling_options(self) -> list[CodeDescription]:
        """Sampling options in effect today."""

    async def assess_area_statuses(self) -> list[CodeDescription]:
        """Assessment-area statuses in effect today."""


class IClientResolver(Protocol):
    """Protocol for resilient Forest Client lookups.

    Implementations never raise upstream errors; failures degrade to the
    typed empty value (None, [] or an empty page).
    """

    async def fetch_by_number(self, client_number: str) -> ClientRecord | None:
        """Return the client or None when absent or unavailable."""

    async def fetch_locations(self, client_number: str) -> list[ClientLocationRecord]:
        """Return all locations of the client (empty on failure)."""

    async def search_by_numbers(
        self,
        client_numbers: Sequence[str],
        name: str | None = None,
    ) -> list[ClientRecord]:
        """Batch lookup by client numbers (one upstream call)."""

    async def search_clients(
        self, value: str, page: int = 0, size: int = 10
    ) -> Page[ClientRecord]:
        """Autocomplete search by name, acronym or number."""
