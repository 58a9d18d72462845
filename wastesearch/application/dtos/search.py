"""DTOs for reporting-unit search (no dependency on ORM or HTTP).

SearchFilter holds sentinel values for absent criteria so the storage
predicates keep one shape. Results and pages are frozen; enrichment
produces new records through the with_* helpers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Generic, Literal, TypeVar

from wastesearch.core.constants import NOCLIENT, NOVALUE
from wastesearch.domain.exceptions import ValidationException

T = TypeVar("T")
U = TypeVar("U")

SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class SortOrder:
    """One caller-visible sort directive (field name is not yet whitelisted)."""

    field: str
    direction: SortDirection = "asc"

    @classmethod
    def parse(cls, raw: str) -> SortOrder:
        """Parse 'field' or 'field,asc|desc' (direction case-insensitive)."""
        parts = [p.strip() for p in raw.split(",")]
        if not parts[0] or len(parts) > 2:
            raise ValidationException(f"Invalid sort directive: {raw!r}", field="sort")
        direction = parts[1].lower() if len(parts) == 2 and parts[1] else "asc"
        if direction not in ("asc", "desc"):
            raise ValidationException(
                f"Invalid sort direction {parts[1]!r}; use asc or desc", field="sort"
            )
        return cls(field=parts[0], direction=direction)


@dataclass(frozen=True)
class ResolvedOrder:
    """Sort directive over a storage column; only built by the field whitelist."""

    column: str
    direction: SortDirection


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page index and page size."""

    page: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValidationException("page must be >= 0", field="page")
        if self.size < 1:
            raise ValidationException("size must be >= 1", field="size")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    """Ordered page of results plus the total match count.

    Invariants: len(content) <= page_size and total_elements >= len(content).
    """

    content: tuple[T, ...]
    total_elements: int
    page_number: int
    page_size: int

    def __post_init__(self) -> None:
        if len(self.content) > self.page_size:
            raise ValueError(
                f"page holds {len(self.content)} items but page_size is {self.page_size}"
            )
        if self.total_elements < len(self.content):
            raise ValueError(
                f"total_elements {self.total_elements} is less than page content {len(self.content)}"
            )

    @classmethod
    def empty(cls, page: PageRequest) -> Page[T]:
        return cls(content=(), total_elements=0, page_number=page.page, page_size=page.size)

    def map(self, fn: Callable[[T], U]) -> Page[U]:
        """Return a page with fn applied to every item; order and totals unchanged."""
        return Page(
            content=tuple(fn(item) for item in self.content),
            total_elements=self.total_elements,
            page_number=self.page_number,
            page_size=self.page_size,
        )


@dataclass(frozen=True)
class CallerScope:
    """Authenticated caller as seen by the search pipeline.

    authorized_clients is ignored when unrestricted is True. A restricted
    caller with an empty set sees nothing.
    """

    user_id: str
    authorized_clients: frozenset[str] = frozenset()
    unrestricted: bool = False


@dataclass(frozen=True)
class SearchFilter:
    """Normalized search criteria.

    Absent scalars are NOVALUE and absent collections are (NOVALUE,); no
    field is ever None. Replace client_numbers only via with_client_numbers.
    """

    main_search_term: str = NOVALUE
    district: tuple[str, ...] = (NOVALUE,)
    sampling: tuple[str, ...] = (NOVALUE,)
    status: tuple[str, ...] = (NOVALUE,)
    client_numbers: tuple[str, ...] = (NOVALUE,)
    requested_by_me: bool = False
    request_user_id: str = NOVALUE
    date_start: str = NOVALUE
    date_end: str = NOVALUE
    licensee_id: str = NOVALUE
    cutting_permit_id: str = NOVALUE
    timber_mark: str = NOVALUE
    client_location_code: str = NOVALUE
    multi_mark: bool = False

    @property
    def has_client_numbers(self) -> bool:
        """True when the caller supplied explicit client numbers."""
        return self.client_numbers != (NOVALUE,)

    @property
    def denies_all(self) -> bool:
        """True when scope narrowing left no client the caller may see."""
        return self.client_numbers == (NOCLIENT,)

    def with_client_numbers(self, client_numbers: tuple[str, ...]) -> SearchFilter:
        return replace(self, client_numbers=client_numbers)


@dataclass(frozen=True)
class ReportingUnitRow:
    """Flat projection of one matched reporting unit / block (read-model)."""

    ru_number: int
    block_id: int | None
    cut_block_id: str | None
    client_number: str | None
    client_location: str | None
    licence_number: str | None
    cutting_permit: str | None
    timber_mark: str | None
    multi_mark: bool
    secondary_entry: bool
    sampling_code: str | None
    sampling_name: str | None
    district_code: str | None
    district_name: str | None
    status_code: str | None
    status_name: str | None
    last_updated: datetime | None


@dataclass(frozen=True)
class CodeDescription:
    """Code with its display description (None when unresolved)."""

    code: str | None
    description: str | None = None


@dataclass(frozen=True)
class ReportingUnitResult:
    """Public search result for one reporting unit block."""

    ru_number: int
    block_id: int | None
    cut_block_id: str | None
    licence_number: str | None
    cutting_permit: str | None
    timber_mark: str | None
    multi_mark: bool
    secondary_entry: bool
    client: CodeDescription
    client_location: CodeDescription
    sampling: CodeDescription
    district: CodeDescription
    status: CodeDescription
    last_updated: datetime | None

    def with_client(self, client: CodeDescription) -> ReportingUnitResult:
        return replace(self, client=client)

    def with_client_location(self, client_location: CodeDescription) -> ReportingUnitResult:
        return replace(self, client_location=client_location)
