"""Code lists for the search form selectors."""

from typing import Annotated

from fastapi import APIRouter, Depends

from wastesearch.api.v1.dependencies import get_caller, get_codes_service
from wastesearch.application.dtos.search import CallerScope
from wastesearch.application.use_cases.codes import CodesService
from wastesearch.schemas.search import CodeDescriptionResponse

router = APIRouter()


@router.get("/districts", response_model=list[CodeDescriptionResponse])
async def list_districts(
    _: Annotated[CallerScope, Depends(get_caller)],
    codes_svc: Annotated[CodesService, Depends(get_codes_service)],
) -> list[CodeDescriptionResponse]:
    """Districts offered for filtering, ordered by code."""
    return [CodeDescriptionResponse.model_validate(c) for c in await codes_svc.districts()]


@router.get("/samplings", response_model=list[CodeDescriptionResponse])
async def list_sampling_options(
    _: Annotated[CallerScope, Depends(get_caller)],
    codes_svc: Annotated[CodesService, Depends(get_codes_service)],
) -> list[CodeDescriptionResponse]:
    return [
        CodeDescriptionResponse.model_validate(c) for c in await codes_svc.sampling_options()
    ]


@router.get("/assess-area-statuses", response_model=list[CodeDescriptionResponse])
async def list_assess_area_statuses(
    _: Annotated[CallerScope, Depends(get_caller)],
    codes_svc: Annotated[CodesService, Depends(get_codes_service)],
) -> list[CodeDescriptionResponse]:
    return [
        CodeDescriptionResponse.model_validate(c)
        for c in await codes_svc.assess_area_statuses()
    ]
