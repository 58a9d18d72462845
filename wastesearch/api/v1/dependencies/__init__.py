"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers, never on infrastructure directly.
"""

from wastesearch.api.v1.dependencies.caller import get_caller
from wastesearch.api.v1.dependencies.codes import get_codes_repo, get_codes_service
from wastesearch.api.v1.dependencies.forest_client import (
    get_client_resolver,
    get_forest_client_service,
)
from wastesearch.api.v1.dependencies.search import (
    get_enricher,
    get_reporting_unit_repo,
    get_search_service,
)

__all__ = [
    "get_caller",
    "get_client_resolver",
    "get_codes_repo",
    "get_codes_service",
    "get_enricher",
    "get_forest_client_service",
    "get_reporting_unit_repo",
    "get_search_service",
]
