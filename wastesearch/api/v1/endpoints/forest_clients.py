"""Forest Client lookup API: detail, autocomplete, locations and batch search."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from wastesearch.api.v1.dependencies import get_caller, get_forest_client_service
from wastesearch.application.dtos.search import CallerScope
from wastesearch.application.use_cases.forest_clients import ForestClientService
from wastesearch.schemas.forest_client import (
    ForestClientAutocompleteResponse,
    ForestClientResponse,
)
from wastesearch.schemas.search import CodeDescriptionResponse

router = APIRouter()


@router.get("/byNameAcronymNumber", response_model=list[ForestClientAutocompleteResponse])
async def search_forest_clients(
    caller: Annotated[CallerScope, Depends(get_caller)],
    client_svc: Annotated[ForestClientService, Depends(get_forest_client_service)],
    value: Annotated[str, Query(min_length=1, max_length=100)],
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[ForestClientAutocompleteResponse]:
    """Autocomplete clients by name, acronym or number."""
    hits = await client_svc.autocomplete(value, page, size, caller)
    return [ForestClientAutocompleteResponse.model_validate(h) for h in hits]


@router.get("/searchByNumbers", response_model=list[ForestClientResponse])
async def search_by_client_numbers(
    _: Annotated[CallerScope, Depends(get_caller)],
    client_svc: Annotated[ForestClientService, Depends(get_forest_client_service)],
    values: Annotated[list[str], Query(min_length=1)],
) -> list[ForestClientResponse]:
    records = await client_svc.search_by_numbers(values)
    return [ForestClientResponse.from_record(r) for r in records]


@router.get("/{client_number}", response_model=ForestClientResponse)
async def get_forest_client(
    client_number: str,
    _: Annotated[CallerScope, Depends(get_caller)],
    client_svc: Annotated[ForestClientService, Depends(get_forest_client_service)],
) -> ForestClientResponse:
    """Client by number; 404 when the registry has no such client."""
    record = await client_svc.get_client(client_number)
    return ForestClientResponse.from_record(record)


@router.get("/{client_number}/locations", response_model=list[CodeDescriptionResponse])
async def get_forest_client_locations(
    client_number: str,
    _: Annotated[CallerScope, Depends(get_caller)],
    client_svc: Annotated[ForestClientService, Depends(get_forest_client_service)],
) -> list[CodeDescriptionResponse]:
    """Location codes and names of the client."""
    locations = await client_svc.get_locations(client_number)
    return [CodeDescriptionResponse.model_validate(loc) for loc in locations]
