"""DTOs for Forest Client registry records (read-only, never persisted)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

from wastesearch.domain.enums import ClientStatus, ClientType, YesNo


@dataclass(frozen=True)
class ClientRecord:
    """Forest client as returned by the registry."""

    client_number: str
    client_name: str | None = None
    legal_first_name: str | None = None
    legal_middle_name: str | None = None
    client_status: ClientStatus | None = None
    client_type: ClientType | None = None
    acronym: str | None = None

    @property
    def name(self) -> str | None:
        """Display name: legal name parts for individuals, otherwise client_name."""
        if self.client_type is ClientType.INDIVIDUAL:
            parts = (self.legal_first_name, self.legal_middle_name, self.client_name)
            return " ".join(p.strip() for p in parts if p is not None)
        return self.client_name

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ClientRecord:
        """Build from a registry JSON object (camelCase keys)."""
        return cls(
            client_number=payload.get("clientNumber") or "",
            client_name=payload.get("clientName"),
            legal_first_name=payload.get("legalFirstName"),
            legal_middle_name=payload.get("legalMiddleName"),
            client_status=ClientStatus.from_code(payload.get("clientStatusCode")),
            client_type=ClientType.from_code(payload.get("clientTypeCode")),
            acronym=payload.get("acronym"),
        )

    def to_cache(self) -> dict[str, Any]:
        """JSON-serializable form for the fallback cache."""
        data = asdict(self)
        data["client_status"] = self.client_status.value if self.client_status else None
        data["client_type"] = self.client_type.value if self.client_type else None
        return data

    @classmethod
    def from_cache(cls, data: dict[str, Any]) -> ClientRecord:
        return cls(
            **{
                **data,
                "client_status": ClientStatus.from_code(data.get("client_status")),
                "client_type": ClientType.from_code(data.get("client_type")),
            }
        )


@dataclass(frozen=True)
class ClientLocationRecord:
    """One location (address/contact) of a forest client."""

    client_number: str
    location_code: str
    location_name: str | None = None
    company_code: str | None = None
    address_1: str | None = None
    address_2: str | None = None
    address_3: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    business_phone: str | None = None
    home_phone: str | None = None
    cell_phone: str | None = None
    fax_number: str | None = None
    email: str | None = None
    expired: YesNo | None = None
    trusted: YesNo | None = None
    returned_mail_date: date | None = None
    comment: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ClientLocationRecord:
        """Build from a registry JSON object (camelCase keys)."""
        returned = payload.get("returnedMailDate")
        return cls(
            client_number=payload.get("clientNumber") or "",
            location_code=payload.get("locationCode") or "",
            location_name=payload.get("locationName"),
            company_code=payload.get("companyCode"),
            address_1=payload.get("address1"),
            address_2=payload.get("address2"),
            address_3=payload.get("address3"),
            city=payload.get("city"),
            province=payload.get("province"),
            postal_code=payload.get("postalCode"),
            country=payload.get("country"),
            business_phone=payload.get("businessPhone"),
            home_phone=payload.get("homePhone"),
            cell_phone=payload.get("cellPhone"),
            fax_number=payload.get("faxNumber"),
            email=payload.get("email"),
            expired=YesNo.from_code(payload.get("expired")),
            trusted=YesNo.from_code(payload.get("trusted")),
            returned_mail_date=date.fromisoformat(returned) if returned else None,
            comment=payload.get("comment"),
        )

    def to_cache(self) -> dict[str, Any]:
        data = asdict(self)
        data["expired"] = self.expired.value if self.expired else None
        data["trusted"] = self.trusted.value if self.trusted else None
        data["returned_mail_date"] = (
            self.returned_mail_date.isoformat() if self.returned_mail_date else None
        )
        return data

    @classmethod
    def from_cache(cls, data: dict[str, Any]) -> ClientLocationRecord:
        returned = data.get("returned_mail_date")
        return cls(
            **{
                **data,
                "expired": YesNo.from_code(data.get("expired")),
                "trusted": YesNo.from_code(data.get("trusted")),
                "returned_mail_date": date.fromisoformat(returned) if returned else None,
            }
        )


@dataclass(frozen=True)
class ClientAutocompleteResult:
    """Client hit for the name/acronym/number autocomplete."""

    id: str
    name: str | None
    acronym: str | None
