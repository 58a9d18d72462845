"""Forest Client registry integration: raw API, resilience and resolver."""

from wastesearch.infrastructure.external.forest_client.api import (
    ForestClientApi,
    build_http_client,
)
from wastesearch.infrastructure.external.forest_client.resilience import (
    BreakerRegistry,
    CircuitBreaker,
    RetryPolicy,
    parse_retry_after,
)
from wastesearch.infrastructure.external.forest_client.resolver import (
    FOREST_CLIENT_BREAKER,
    ClientResolver,
)

__all__ = [
    "FOREST_CLIENT_BREAKER",
    "BreakerRegistry",
    "CircuitBreaker",
    "ClientResolver",
    "ForestClientApi",
    "RetryPolicy",
    "build_http_client",
    "parse_retry_after",
]
