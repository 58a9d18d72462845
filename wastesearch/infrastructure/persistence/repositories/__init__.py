"""SQLAlchemy repositories (read-only)."""

from wastesearch.infrastructure.persistence.repositories.codes_repo import CodesRepository
from wastesearch.infrastructure.persistence.repositories.reporting_unit_repo import (
    ReportingUnitRepository,
)

__all__ = ["CodesRepository", "ReportingUnitRepository"]
