"""Reporting-unit search dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastesearch.application.services.enrichment import ReportingUnitEnricher
from wastesearch.application.use_cases.search import ReportingUnitSearchService
from wastesearch.core.config import Settings, get_settings
from wastesearch.infrastructure.external.forest_client.resolver import ClientResolver
from wastesearch.infrastructure.persistence.database import get_db
from wastesearch.infrastructure.persistence.repositories import ReportingUnitRepository

from .forest_client import get_client_resolver


async def get_reporting_unit_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportingUnitRepository:
    """Reporting-unit query executor (read-only)."""
    return ReportingUnitRepository(db)


def get_enricher(
    resolver: Annotated[ClientResolver, Depends(get_client_resolver)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReportingUnitEnricher:
    return ReportingUnitEnricher(resolver, settings.enrichment_max_concurrency)


async def get_search_service(
    repo: Annotated[ReportingUnitRepository, Depends(get_reporting_unit_repo)],
    enricher: Annotated[ReportingUnitEnricher, Depends(get_enricher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReportingUnitSearchService:
    """Search use case: scope, query, map and enrich."""
    return ReportingUnitSearchService(
        repo, enricher, timeout_seconds=settings.search_timeout_seconds
    )
