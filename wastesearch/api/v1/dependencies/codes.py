"""Code list dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastesearch.application.use_cases.codes import CodesService
from wastesearch.core.config import Settings, get_settings
from wastesearch.infrastructure.persistence.database import get_db
from wastesearch.infrastructure.persistence.repositories import CodesRepository


async def get_codes_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CodesRepository:
    return CodesRepository(db)


async def get_codes_service(
    repo: Annotated[CodesRepository, Depends(get_codes_repo)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CodesService:
    """Code lists; districts limited to the configured org units."""
    return CodesService(repo, settings.district_code_list)
