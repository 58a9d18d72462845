"""Build a SearchFilter from raw request values.

Absent or blank values become the NOVALUE sentinel so the query keeps a
single predicate shape. Scalars compared against upper-cased columns are
trimmed and upper-cased here.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from wastesearch.application.dtos.search import SearchFilter
from wastesearch.core.constants import NOVALUE
from wastesearch.domain.client_numbers import canonical_client_number
from wastesearch.domain.exceptions import ValidationException


def _scalar(value: str | None, upper: bool = True) -> str:
    """Trimmed value, or NOVALUE when missing or blank."""
    if value is None or not value.strip():
        return NOVALUE
    value = value.strip()
    return value.upper() if upper else value


def _values(values: Iterable[str] | None, upper: bool = True) -> tuple[str, ...]:
    """Distinct non-blank values in request order, or (NOVALUE,) when none."""
    if not values:
        return (NOVALUE,)
    cleaned: list[str] = []
    for value in values:
        if value is None or not value.strip():
            continue
        # Repeated params and comma-joined lists are both accepted.
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            part = part.upper() if upper else part
            if part not in cleaned:
                cleaned.append(part)
    return tuple(cleaned) if cleaned else (NOVALUE,)


def _client_values(values: Iterable[str]) -> tuple[str, ...]:
    """Like _values, with numeric client numbers zero padded to eight digits."""
    cleaned = _values(values, upper=False)
    if cleaned == (NOVALUE,):
        return cleaned
    return tuple(dict.fromkeys(canonical_client_number(v) for v in cleaned))


def _iso(value: date | None) -> str:
    return value.isoformat() if value is not None else NOVALUE


def build_search_filter(
    *,
    main_search_term: str | None = None,
    district: Iterable[str] | None = None,
    sampling: Iterable[str] | None = None,
    status: Iterable[str] | None = None,
    client_number: str | None = None,
    client_numbers: Iterable[str] | None = None,
    requested_by_me: bool = False,
    caller_user_id: str | None = None,
    update_date_start: date | None = None,
    update_date_end: date | None = None,
    licensee_id: str | None = None,
    cutting_permit_id: str | None = None,
    timber_mark: str | None = None,
    client_location_code: str | None = None,
    multi_mark: bool = False,
) -> SearchFilter:
    """Validate and default raw search parameters.

    An empty list and a missing list are the same: both become the sentinel.
    A scalar client_number is merged into client_numbers, and numeric client
    numbers are zero padded. The caller id is
    used only when requested_by_me is set.

    Raises:
        ValidationException: start date after end date, or requested_by_me
            without a caller id.
    """
    if (
        update_date_start is not None
        and update_date_end is not None
        and update_date_start > update_date_end
    ):
        raise ValidationException(
            "updateDateStart must not be after updateDateEnd", field="updateDateStart"
        )

    request_user_id = NOVALUE
    if requested_by_me:
        request_user_id = _scalar(caller_user_id)
        if request_user_id == NOVALUE:
            raise ValidationException(
                "requestByMe needs an identified caller", field="requestByMe"
            )

    numbers = list(client_numbers or [])
    if client_number is not None:
        numbers.append(client_number)

    return SearchFilter(
        main_search_term=_scalar(main_search_term),
        district=_values(district),
        sampling=_values(sampling),
        status=_values(status),
        client_numbers=_client_values(numbers),
        requested_by_me=requested_by_me,
        request_user_id=request_user_id,
        date_start=_iso(update_date_start),
        date_end=_iso(update_date_end),
        licensee_id=_scalar(licensee_id),
        cutting_permit_id=_scalar(cutting_permit_id),
        timber_mark=_scalar(timber_mark),
        client_location_code=_scalar(client_location_code),
        multi_mark=multi_mark,
    )
