"""Code lists for the search form: districts, sampling options, assessment-area statuses."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from wastesearch.application.dtos.search import CodeDescription
from wastesearch.application.services.row_mapper import district_display_name
from wastesearch.core.constants import NOVALUE
from wastesearch.shared.telemetry import traced

if TYPE_CHECKING:
    from wastesearch.application.interfaces.repositories import ICodesRepository


class CodesService:
    """Serve the selectors' code lists, ordered by code."""

    def __init__(self, repo: "ICodesRepository", district_codes: Sequence[str] = ()) -> None:
        self.repo = repo
        self.district_codes = tuple(district_codes) or (NOVALUE,)

    @traced("codes.districts")
    async def districts(self) -> list[CodeDescription]:
        """Configured districts with display names (suffix stripped)."""
        rows = await self.repo.districts(self.district_codes)
        return [CodeDescription(r.code, district_display_name(r.description)) for r in rows]

    async def sampling_options(self) -> list[CodeDescription]:
        return await self.repo.sampling_options()

    async def assess_area_statuses(self) -> list[CodeDescription]:
        return await self.repo.assess_area_statuses()
