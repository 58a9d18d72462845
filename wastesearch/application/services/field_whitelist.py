"""Sortable field whitelist: caller-visible names to storage columns.

The map is closed and hand-written. Nothing outside it ever reaches an
ORDER BY clause.
"""

from __future__ import annotations

from collections.abc import Sequence

from wastesearch.application.dtos.search import ResolvedOrder, SortOrder
from wastesearch.domain.exceptions import InvalidSortFieldException

SORT_FIELDS: dict[str, str] = {
    "ruNumber": "ru_number",
    "blockId": "block_id",
    "cutBlockId": "cut_block_id",
    "client": "client_number",
    "clientNumber": "client_number",
    "client.code": "client_number",
    # Descriptions and names sort by their code.
    "client.description": "client_number",
    "clientName": "client_number",
    "clientLocation": "client_location",
    "clientLocation.code": "client_location",
    "clientLocation.description": "client_location",
    "licenceNumber": "licence_number",
    "cuttingPermit": "cutting_permit",
    "timberMark": "timber_mark",
    "sampling": "sampling_code",
    "sampling.code": "sampling_code",
    "sampling.description": "sampling_code",
    "samplingCode": "sampling_code",
    "samplingName": "sampling_code",
    "district": "district_code",
    "district.code": "district_code",
    "district.description": "district_code",
    "districtCode": "district_code",
    "districtName": "district_code",
    "status": "status_code",
    "status.code": "status_code",
    "status.description": "status_code",
    "statusCode": "status_code",
    "statusName": "status_code",
    "lastUpdated": "last_updated",
}

SORTABLE_COLUMNS: frozenset[str] = frozenset(SORT_FIELDS.values())

# Appended to every ORDER BY so paging is deterministic.
TIEBREAKER: tuple[ResolvedOrder, ...] = (
    ResolvedOrder("ru_number", "asc"),
    ResolvedOrder("block_id", "asc"),
)


def resolve(field: str) -> str:
    """Return the storage column for a caller-visible field.

    Raises:
        InvalidSortFieldException: field is not whitelisted.
    """
    column = SORT_FIELDS.get(field)
    if column is None:
        raise InvalidSortFieldException(field)
    return column


def resolve_sort(orders: Sequence[SortOrder]) -> tuple[ResolvedOrder, ...]:
    """Resolve a whole sort request and append the tiebreaker columns.

    Fails on the first unknown field. A column already ordered by the caller
    is not repeated; later duplicates of the same column are dropped.
    """
    resolved: list[ResolvedOrder] = []
    seen: set[str] = set()
    for order in orders:
        column = resolve(order.field)
        if column in seen:
            continue
        seen.add(column)
        resolved.append(ResolvedOrder(column, order.direction))
    for order in TIEBREAKER:
        if order.column not in seen:
            resolved.append(order)
    return tuple(resolved)
