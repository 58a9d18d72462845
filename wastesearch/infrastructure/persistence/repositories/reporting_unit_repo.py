"""Reporting-unit search repository. PostgreSQL text() queries with sentinel predicates.

Every predicate has the shape "sentinel OR column matches", so one fixed
statement serves every filter combination. The page query and the count
query are built from the same SELECT/FROM/WHERE text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wastesearch.application.dtos.search import (
    PageRequest,
    ReportingUnitRow,
    ResolvedOrder,
    SearchFilter,
)
from wastesearch.application.services.field_whitelist import SORTABLE_COLUMNS
from wastesearch.domain.exceptions import SearchUnavailableException
from wastesearch.shared.telemetry import add_span_attributes, traced
from wastesearch.shared.utils import ensure_utc

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT
      wru.reporting_unit_id AS ru_number,
      waa.waste_assessment_area_id AS block_id,
      COALESCE(waa.cut_block_id, waa.draft_cut_block_id) AS cut_block_id,
      wru.client_number AS client_number,
      wru.client_locn_code AS client_location,
      waa.forest_file_id AS licence_number,
      NULLIF(TRIM(COALESCE(waa.cutting_permit_id, waa.draft_cutting_permit_id)), '') AS cutting_permit,
      COALESCE(waa.timber_mark, waa.draft_timber_mark) AS timber_mark,
      COALESCE(waa.multi_mark_ind, 'N') = 'Y' AS multi_mark,
      waa.parent_waa_id IS NOT NULL AS secondary_entry,
      wru.waste_sampling_option_code AS sampling_code,
      wsoc.description AS sampling_name,
      ou.org_unit_code AS district_code,
      ou.org_unit_name AS district_name,
      waa.waste_assess_area_sts_code AS status_code,
      waasc.description AS status_name,
      wru.update_timestamp AS last_updated
"""

_FROM = """
    FROM waste_reporting_unit wru
      LEFT JOIN waste_sampling_option_code wsoc
        ON wsoc.waste_sampling_option_code = wru.waste_sampling_option_code
      LEFT JOIN waste_assessment_area waa
        ON waa.reporting_unit_id = wru.reporting_unit_id
      LEFT JOIN waste_assess_area_sts_code waasc
        ON waasc.waste_assess_area_sts_code = waa.waste_assess_area_sts_code
      LEFT JOIN org_unit ou
        ON ou.org_unit_no = wru.org_unit_no
"""

# Numeric main search terms match the reporting unit number; the number is
# derived in Python (:main_search_number is NULL for non-numeric terms).
_WHERE = """
    WHERE
      (
        :main_search_term = 'NOVALUE'
        OR wru.reporting_unit_id = :main_search_number
        OR UPPER(waa.draft_cut_block_id) = :main_search_term
        OR UPPER(waa.cut_block_id) = :main_search_term
      )
      AND ('NOVALUE' IN :district OR ou.org_unit_code IN :district)
      AND ('NOVALUE' IN :sampling OR wru.waste_sampling_option_code IN :sampling)
      AND ('NOVALUE' IN :status OR waa.waste_assess_area_sts_code IN :status)
      AND ('NOVALUE' IN :client_numbers OR wru.client_number IN :client_numbers)
      AND (
        :request_user_id = 'NOVALUE'
        OR UPPER(waa.entry_userid) = :request_user_id
      )
      AND (
        :licensee_id = 'NOVALUE'
        OR UPPER(waa.forest_file_id) = :licensee_id
      )
      AND (
        :cutting_permit_id = 'NOVALUE'
        OR UPPER(waa.draft_cutting_permit_id) = :cutting_permit_id
        OR UPPER(waa.cutting_permit_id) = :cutting_permit_id
      )
      AND (
        :timber_mark = 'NOVALUE'
        OR UPPER(waa.draft_timber_mark) = :timber_mark
        OR UPPER(waa.timber_mark) = :timber_mark
        OR EXISTS (
          SELECT 1 FROM waste_assessment_area waa_child
          WHERE waa_child.parent_waa_id = waa.waste_assessment_area_id
            AND (
              UPPER(waa_child.draft_timber_mark) = :timber_mark
              OR UPPER(waa_child.timber_mark) = :timber_mark
            )
        )
      )
      AND (
        :client_location_code = 'NOVALUE'
        OR UPPER(wru.client_locn_code) = :client_location_code
      )
      AND (
        :date_start = 'NOVALUE'
        OR CAST(wru.update_timestamp AS DATE) >= CAST(NULLIF(:date_start, 'NOVALUE') AS DATE)
      )
      AND (
        :date_end = 'NOVALUE'
        OR CAST(wru.update_timestamp AS DATE) <= CAST(NULLIF(:date_end, 'NOVALUE') AS DATE)
      )
      AND (
        :multi_mark = FALSE
        OR waa.multi_mark_ind = 'Y'
      )
"""

_FILTERED = _SELECT + _FROM + _WHERE

# Users who created or last updated a reporting unit of the given clients.
_USERS = text(
    """
    SELECT user_id FROM (
      SELECT wru.entry_userid AS user_id
      FROM waste_reporting_unit wru
      WHERE 'NOVALUE' IN :client_numbers OR wru.client_number IN :client_numbers
      UNION
      SELECT wru.update_userid AS user_id
      FROM waste_reporting_unit wru
      WHERE 'NOVALUE' IN :client_numbers OR wru.client_number IN :client_numbers
    ) AS users
    WHERE user_id IS NOT NULL
      AND POSITION(:fragment IN UPPER(user_id)) > 0
    ORDER BY user_id
    LIMIT :limit
"""
).bindparams(bindparam("client_numbers", expanding=True))

_NUMERIC_TERM = re.compile(r"[0-9]{1,18}")

_EXPANDING = ("district", "sampling", "status", "client_numbers")


def _statement(sql: str) -> TextClause:
    return text(sql).bindparams(*(bindparam(name, expanding=True) for name in _EXPANDING))


def _order_by(orders: Sequence[ResolvedOrder]) -> str:
    """ORDER BY clause from whitelisted columns only."""
    clauses: list[str] = []
    for order in orders:
        if order.column not in SORTABLE_COLUMNS or order.direction not in ("asc", "desc"):
            raise ValueError(f"Refusing non-whitelisted sort: {order!r}")
        clauses.append(f"{order.column} {order.direction.upper()} NULLS LAST")
    return "ORDER BY " + ", ".join(clauses)


def _filter_params(search_filter: SearchFilter) -> dict[str, Any]:
    term = search_filter.main_search_term
    return {
        "main_search_term": term,
        "main_search_number": int(term) if _NUMERIC_TERM.fullmatch(term) else None,
        "district": list(search_filter.district),
        "sampling": list(search_filter.sampling),
        "status": list(search_filter.status),
        "client_numbers": list(search_filter.client_numbers),
        "request_user_id": search_filter.request_user_id,
        "licensee_id": search_filter.licensee_id,
        "cutting_permit_id": search_filter.cutting_permit_id,
        "timber_mark": search_filter.timber_mark,
        "client_location_code": search_filter.client_location_code,
        "date_start": search_filter.date_start,
        "date_end": search_filter.date_end,
        "multi_mark": search_filter.multi_mark,
    }


def _row_from_mapping(row: Mapping[str, Any]) -> ReportingUnitRow:
    return ReportingUnitRow(
        ru_number=row["ru_number"],
        block_id=row["block_id"],
        cut_block_id=row["cut_block_id"],
        client_number=row["client_number"],
        client_location=row["client_location"],
        licence_number=row["licence_number"],
        cutting_permit=row["cutting_permit"],
        timber_mark=row["timber_mark"],
        multi_mark=bool(row["multi_mark"]),
        secondary_entry=bool(row["secondary_entry"]),
        sampling_code=row["sampling_code"],
        sampling_name=row["sampling_name"],
        district_code=row["district_code"],
        district_name=row["district_name"],
        status_code=row["status_code"],
        status_name=row["status_name"],
        last_updated=ensure_utc(row["last_updated"]),
    )


class ReportingUnitRepository:
    """Paged reporting-unit search with a matching total count (read-only)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @traced("reporting_unit_repo.search")
    async def search(
        self,
        search_filter: SearchFilter,
        orders: Sequence[ResolvedOrder],
        page: PageRequest,
    ) -> tuple[list[ReportingUnitRow], int]:
        """Return the requested page of rows and the total match count.

        orders must come from the field whitelist (tiebreaker included).
        Both statements run on this session, one after the other.

        Raises:
            SearchUnavailableException: the database failed; no partial page.
        """
        params = _filter_params(search_filter)
        page_stmt = _statement(
            f"{_FILTERED} {_order_by(orders)} LIMIT :limit OFFSET :offset"
        )
        count_stmt = _statement(f"SELECT COUNT(1) AS total FROM ({_FILTERED}) AS matched")
        try:
            r = await self.db.execute(
                page_stmt, {**params, "limit": page.size, "offset": page.offset}
            )
            rows = [_row_from_mapping(row) for row in r.mappings().all()]
            total = (await self.db.execute(count_stmt, params)).scalar_one()
        except SQLAlchemyError as e:
            logger.exception("Reporting unit search failed: %s", e)
            raise SearchUnavailableException() from e
        # Count and page are separate statements; keep the page invariants.
        total = max(int(total or 0), page.offset + len(rows) if rows else 0)
        add_span_attributes(**{"search.rows": len(rows), "search.total": total})
        logger.debug(
            "Reporting unit search page=%s size=%s rows=%s total=%s",
            page.page,
            page.size,
            len(rows),
            total,
        )
        return rows, total

    @traced("reporting_unit_repo.search_users")
    async def search_users(
        self, user_id: str, client_numbers: Sequence[str], limit: int
    ) -> list[str]:
        """User ids on reporting units of client_numbers containing user_id.

        user_id is matched upper-cased anywhere in the stored id, so both
        "JRYAN" and "IDIR\\JRYAN" find "IDIR\\JRYAN".

        Raises:
            SearchUnavailableException: the database failed.
        """
        params = {
            "fragment": user_id.upper(),
            "client_numbers": list(client_numbers),
            "limit": limit,
        }
        try:
            r = await self.db.execute(_USERS, params)
            users = list(r.scalars().all())
        except SQLAlchemyError as e:
            logger.exception("Reporting unit user search failed: %s", e)
            raise SearchUnavailableException() from e
        add_span_attributes(**{"search.users": len(users)})
        return users
