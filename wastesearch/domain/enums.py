"""Domain enumerations for Forest Client records.

Enums carry the upstream single-character or three-letter codes as values;
descriptions are exposed for display.
"""

from enum import Enum


class _CodedEnum(str, Enum):
    """str Enum whose members also carry a display description."""

    def __new__(cls, code: str, description: str) -> "_CodedEnum":
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.description = description
        return obj

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid codes as strings."""
        return [member.value for member in cls]

    @classmethod
    def from_code(cls, code: str | None) -> "_CodedEnum | None":
        """Return the member for code (case-insensitive), or None when unknown."""
        if not code:
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None


class ClientStatus(_CodedEnum):
    """Forest client registration status."""

    ACTIVE = ("ACT", "Active")
    DEACTIVATED = ("DAC", "Deactivated")
    DECEASED = ("DEC", "Deceased")
    RECEIVERSHIP = ("REC", "Receivership")
    SUSPENDED = ("SPN", "Suspended")


class ClientType(_CodedEnum):
    """Forest client type. INDIVIDUAL clients are displayed by their legal name."""

    ASSOCIATION = ("A", "Association")
    FIRST_NATION_BAND = ("B", "First Nation Band")
    CORPORATION = ("C", "Corporation")
    MINISTRY_OF_FORESTS_AND_RANGE = ("F", "Ministry of Forests and Range")
    GOVERNMENT = ("G", "Government")
    INDIVIDUAL = ("I", "Individual")
    LIMITED_PARTNERSHIP = ("L", "Limited Partnership")
    GENERAL_PARTNERSHIP = ("P", "General Partnership")
    FIRST_NATION_GROUP = ("R", "First Nation Group")
    SOCIETY = ("S", "Society")
    FIRST_NATION_TRIBAL_COUNCIL = ("T", "First Nation Tribal Council")
    UNREGISTERED_COMPANY = ("U", "Unregistered Company")


class YesNo(_CodedEnum):
    """Y/N flag used on client locations (expired, trusted)."""

    YES = ("Y", "Yes")
    NO = ("N", "No")
