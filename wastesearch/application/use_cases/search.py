"""Reporting-unit search use case: sort resolution, scoping, query, mapping, enrichment."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from wastesearch.application.dtos.search import (
    CallerScope,
    Page,
    PageRequest,
    ReportingUnitResult,
    SearchFilter,
    SortOrder,
)
from wastesearch.application.services.field_whitelist import resolve_sort
from wastesearch.application.services.row_mapper import to_result
from wastesearch.application.services.scope_guard import narrow
from wastesearch.application.services.search_filter import build_search_filter
from wastesearch.domain.exceptions import SearchTimeoutException
from wastesearch.shared.telemetry import traced

if TYPE_CHECKING:
    from wastesearch.application.interfaces.repositories import IReportingUnitRepository
    from wastesearch.application.services.enrichment import ReportingUnitEnricher

logger = logging.getLogger(__name__)


class ReportingUnitSearchService:
    """Search reporting units visible to the caller and enrich the page."""

    def __init__(
        self,
        repo: "IReportingUnitRepository",
        enricher: "ReportingUnitEnricher",
        timeout_seconds: float | None = None,
    ) -> None:
        self.repo = repo
        self.enricher = enricher
        self.timeout_seconds = timeout_seconds

    @traced("search.reporting_units")
    async def search(
        self,
        search_filter: SearchFilter,
        sort: Sequence[SortOrder],
        page: PageRequest,
        caller: CallerScope,
    ) -> Page[ReportingUnitResult]:
        """Run one search.

        Unknown sort fields fail before the caller scope is applied and
        before storage is touched. A restricted caller with no authorized
        clients gets an empty page without a query.

        Raises:
            InvalidSortFieldException: sort names a field that is not sortable.
            ForbiddenException: explicit client numbers outside the caller's set.
            SearchUnavailableException: storage failed.
            SearchTimeoutException: the pipeline exceeded timeout_seconds.
        """
        orders = resolve_sort(sort)
        scoped = narrow(search_filter, caller.authorized_clients, caller.unrestricted)
        if scoped.denies_all:
            return Page.empty(page)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                rows, total = await self.repo.search(scoped, orders, page)
                results = Page(
                    content=tuple(to_result(row) for row in rows),
                    total_elements=total,
                    page_number=page.page,
                    page_size=page.size,
                )
                return await self.enricher.enrich(results)
        except TimeoutError as e:
            logger.error("Search timed out after %ss", self.timeout_seconds)
            raise SearchTimeoutException(self.timeout_seconds) from e

    @traced("search.reporting_unit_users")
    async def search_users(
        self, user_id: str, caller: CallerScope, limit: int = 50
    ) -> list[str]:
        """Users on reporting units the caller may see whose id contains user_id.

        Scoped like search: unrestricted callers see every client, restricted
        callers their own, and a restricted caller with no clients gets [].
        """
        fragment = user_id.strip().upper()
        if not fragment:
            return []
        scoped = narrow(build_search_filter(), caller.authorized_clients, caller.unrestricted)
        if scoped.denies_all:
            return []
        return await self.repo.search_users(fragment, scoped.client_numbers, limit)
