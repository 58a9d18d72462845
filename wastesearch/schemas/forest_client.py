"""Forest Client API schemas."""

from __future__ import annotations

from enum import Enum

from wastesearch.application.dtos.forest_client import ClientRecord
from wastesearch.schemas._base import CamelModel
from wastesearch.schemas.search import CodeDescriptionResponse


def _coded(member: Enum | None) -> CodeDescriptionResponse | None:
    if member is None:
        return None
    return CodeDescriptionResponse(code=member.value, description=member.description)


class ForestClientResponse(CamelModel):
    """Forest client with its resolved display name."""

    client_number: str
    client_name: str | None = None
    legal_first_name: str | None = None
    legal_middle_name: str | None = None
    client_status_code: CodeDescriptionResponse | None = None
    client_type_code: CodeDescriptionResponse | None = None
    acronym: str | None = None
    name: str | None = None

    @classmethod
    def from_record(cls, record: ClientRecord) -> ForestClientResponse:
        return cls(
            client_number=record.client_number,
            client_name=record.client_name,
            legal_first_name=record.legal_first_name,
            legal_middle_name=record.legal_middle_name,
            client_status_code=_coded(record.client_status),
            client_type_code=_coded(record.client_type),
            acronym=record.acronym,
            name=record.name,
        )


class ForestClientAutocompleteResponse(CamelModel):
    """Autocomplete hit: client number as id, display name and acronym."""

    id: str
    name: str | None = None
    acronym: str | None = None
