"""Code-table lookups behind the search form selectors (districts, sampling, statuses)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wastesearch.application.dtos.search import CodeDescription
from wastesearch.domain.exceptions import SearchUnavailableException
from wastesearch.shared.telemetry import add_span_attributes, traced

logger = logging.getLogger(__name__)

_DISTRICTS = text(
    """
    SELECT org_unit_code AS code, org_unit_name AS description
    FROM org_unit
    WHERE 'NOVALUE' IN :codes OR org_unit_code IN :codes
    ORDER BY org_unit_code
"""
).bindparams(bindparam("codes", expanding=True))

# Only codes in effect today: effective already, not yet expired.
_CURRENT_CODES = """
    SELECT {column} AS code, description
    FROM {table}
    WHERE effective_date <= CURRENT_TIMESTAMP
      AND (expiry_date IS NULL OR expiry_date > CURRENT_TIMESTAMP)
    ORDER BY {column}
"""

_SAMPLING_OPTIONS = text(
    _CURRENT_CODES.format(
        column="waste_sampling_option_code", table="waste_sampling_option_code"
    )
)
_ASSESS_AREA_STATUSES = text(
    _CURRENT_CODES.format(
        column="waste_assess_area_sts_code", table="waste_assess_area_sts_code"
    )
)


class CodesRepository:
    """Read-only code tables."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _fetch(
        self, name: str, stmt: TextClause, params: dict[str, Any] | None = None
    ) -> list[CodeDescription]:
        try:
            r = await self.db.execute(stmt, params or {})
            rows = r.mappings().all()
        except SQLAlchemyError as e:
            logger.exception("Loading %s codes failed: %s", name, e)
            raise SearchUnavailableException(f"The {name} code list is unavailable") from e
        add_span_attributes(**{"codes.table": name, "codes.rows": len(rows)})
        return [CodeDescription(row["code"], row["description"]) for row in rows]

    @traced("codes_repo.districts")
    async def districts(self, codes: Sequence[str]) -> list[CodeDescription]:
        """Districts (org units) with the given codes; NOVALUE returns every org unit."""
        return await self._fetch("district", _DISTRICTS, {"codes": list(codes)})

    @traced("codes_repo.sampling_options")
    async def sampling_options(self) -> list[CodeDescription]:
        return await self._fetch("sampling", _SAMPLING_OPTIONS)

    @traced("codes_repo.assess_area_statuses")
    async def assess_area_statuses(self) -> list[CodeDescription]:
        return await self._fetch("status", _ASSESS_AREA_STATUSES)
