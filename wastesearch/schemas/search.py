"""Reporting-unit search API schemas."""

from datetime import datetime

from pydantic import Field

from wastesearch.schemas._base import CamelModel


class CodeDescriptionResponse(CamelModel):
    """Code plus its display description (None when unresolved)."""

    code: str | None = None
    description: str | None = None


class ReportingUnitResponse(CamelModel):
    """One reporting unit / cut block hit."""

    ru_number: int
    block_id: int | None = None
    cut_block_id: str | None = None
    licence_number: str | None = None
    cutting_permit: str | None = None
    timber_mark: str | None = None
    multi_mark: bool = False
    secondary_entry: bool = False
    client: CodeDescriptionResponse
    client_location: CodeDescriptionResponse
    sampling: CodeDescriptionResponse
    district: CodeDescriptionResponse
    status: CodeDescriptionResponse
    last_updated: datetime | None = None


class ReportingUnitPageResponse(CamelModel):
    """Page of reporting units: content in query order plus paging totals."""

    content: list[ReportingUnitResponse] = Field(default_factory=list)
    total_elements: int = Field(..., ge=0)
    page_number: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1)
