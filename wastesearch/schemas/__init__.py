"""Pydantic request/response schemas for the API."""

from wastesearch.schemas.forest_client import (
    ForestClientAutocompleteResponse,
    ForestClientResponse,
)
from wastesearch.schemas.health import HealthResponse
from wastesearch.schemas.search import (
    CodeDescriptionResponse,
    ReportingUnitPageResponse,
    ReportingUnitResponse,
)

__all__ = [
    "CodeDescriptionResponse",
    "ForestClientAutocompleteResponse",
    "ForestClientResponse",
    "HealthResponse",
    "ReportingUnitPageResponse",
    "ReportingUnitResponse",
]
