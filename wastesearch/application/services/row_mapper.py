"""Map raw reporting-unit rows to public search results (pure functions)."""

from __future__ import annotations

from wastesearch.application.dtos.search import (
    CodeDescription,
    ReportingUnitResult,
    ReportingUnitRow,
)
from wastesearch.core.constants import DISTRICT_NAME_SUFFIX


def district_display_name(name: str | None) -> str | None:
    """District name without the 'Natural Resource District' suffix."""
    if name is None:
        return None
    return name.replace(DISTRICT_NAME_SUFFIX, "").strip()


def to_result(row: ReportingUnitRow) -> ReportingUnitResult:
    """Build a result from a row.

    District, sampling and status descriptions come from storage. Client and
    client location carry the code only; enrichment resolves their names.
    """
    return ReportingUnitResult(
        ru_number=row.ru_number,
        block_id=row.block_id,
        cut_block_id=row.cut_block_id,
        licence_number=row.licence_number,
        cutting_permit=row.cutting_permit,
        timber_mark=row.timber_mark,
        multi_mark=row.multi_mark,
        secondary_entry=row.secondary_entry,
        client=CodeDescription(row.client_number),
        client_location=CodeDescription(row.client_location),
        sampling=CodeDescription(row.sampling_code, row.sampling_name),
        district=CodeDescription(row.district_code, district_display_name(row.district_name)),
        status=CodeDescription(row.status_code, row.status_name),
        last_updated=row.last_updated,
    )
