"""Reporting-unit search API."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from wastesearch.api.v1.dependencies import get_caller, get_search_service
from wastesearch.application.dtos.search import CallerScope, PageRequest, SortOrder
from wastesearch.application.services.search_filter import build_search_filter
from wastesearch.application.use_cases.search import ReportingUnitSearchService
from wastesearch.core.config import get_settings
from wastesearch.core.limiter import limit_search
from wastesearch.domain.exceptions import ValidationException
from wastesearch.schemas.search import ReportingUnitPageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_SORT = "lastUpdated,desc"


@router.get("/reporting-units", response_model=ReportingUnitPageResponse)
@limit_search
async def search_reporting_units(
    request: Request,
    caller: Annotated[CallerScope, Depends(get_caller)],
    search_svc: Annotated[ReportingUnitSearchService, Depends(get_search_service)],
    main_search_term: Annotated[str | None, Query(alias="mainSearchTerm", max_length=100)] = None,
    district: Annotated[list[str] | None, Query()] = None,
    sampling: Annotated[list[str] | None, Query()] = None,
    status: Annotated[list[str] | None, Query()] = None,
    request_by_me: Annotated[bool, Query(alias="requestByMe")] = False,
    update_date_start: Annotated[date | None, Query(alias="updateDateStart")] = None,
    update_date_end: Annotated[date | None, Query(alias="updateDateEnd")] = None,
    licensee_id: Annotated[str | None, Query(alias="licenseeId")] = None,
    cutting_permit_id: Annotated[str | None, Query(alias="cuttingPermitId")] = None,
    timber_mark: Annotated[str | None, Query(alias="timberMark")] = None,
    client_location_code: Annotated[str | None, Query(alias="clientLocationCode")] = None,
    client_number: Annotated[str | None, Query(alias="clientNumber")] = None,
    client_numbers: Annotated[list[str] | None, Query(alias="clientNumbers")] = None,
    multi_mark: Annotated[bool, Query(alias="multiMark")] = False,
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[int | None, Query(ge=1)] = None,
    sort: Annotated[list[str] | None, Query()] = None,
) -> ReportingUnitPageResponse:
    """Search reporting units visible to the caller.

    Repeated list parameters and comma-joined values are both accepted.
    Sort entries are `field[,asc|desc]`; unknown fields answer 400.
    """
    settings = get_settings()
    page_size = size if size is not None else settings.search_default_page_size
    if page_size > settings.search_max_page_size:
        raise ValidationException(
            f"size must be <= {settings.search_max_page_size}", field="size"
        )
    search_filter = build_search_filter(
        main_search_term=main_search_term,
        district=district,
        sampling=sampling,
        status=status,
        client_number=client_number,
        client_numbers=client_numbers,
        requested_by_me=request_by_me,
        caller_user_id=caller.user_id,
        update_date_start=update_date_start,
        update_date_end=update_date_end,
        licensee_id=licensee_id,
        cutting_permit_id=cutting_permit_id,
        timber_mark=timber_mark,
        client_location_code=client_location_code,
        multi_mark=multi_mark,
    )
    orders = [SortOrder.parse(raw) for raw in (sort or [DEFAULT_SORT])]
    page_request = PageRequest(page=page, size=page_size)
    logger.info(
        "Reporting unit search page=%d size=%d sort=%s filter=%s",
        page,
        page_size,
        sort or DEFAULT_SORT,
        search_filter,
    )
    result = await search_svc.search(search_filter, orders, page_request, caller)
    return ReportingUnitPageResponse.model_validate(result, from_attributes=True)


@router.get("/reporting-units-users", response_model=list[str])
async def search_reporting_unit_users(
    caller: Annotated[CallerScope, Depends(get_caller)],
    search_svc: Annotated[ReportingUnitSearchService, Depends(get_search_service)],
    user_id: Annotated[str, Query(alias="userId", min_length=1, max_length=100)],
) -> list[str]:
    """User ids on reporting units the caller may see, matched by id fragment."""
    return await search_svc.search_users(
        user_id, caller, limit=get_settings().user_search_limit
    )
