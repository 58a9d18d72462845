"""Forest Client dependencies (composition root).

The resolver is built per request from long-lived pieces kept on app.state
by the lifespan: the shared HTTP client, the breaker registry and the cache.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from wastesearch.application.use_cases.forest_clients import ForestClientService
from wastesearch.core.config import Settings, get_settings
from wastesearch.infrastructure.external.forest_client.api import ForestClientApi
from wastesearch.infrastructure.external.forest_client.resilience import RetryPolicy
from wastesearch.infrastructure.external.forest_client.resolver import (
    FOREST_CLIENT_BREAKER,
    ClientResolver,
)


def get_client_resolver(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ClientResolver:
    """Resilient Forest Client resolver (retry, circuit breaker, cached fallback)."""
    state = request.app.state
    api = ForestClientApi(
        state.forest_client_http,
        locations_page_size=settings.forest_client_locations_page_size,
    )
    return ClientResolver(
        api,
        RetryPolicy.from_settings(settings),
        state.breakers.get(FOREST_CLIENT_BREAKER),
        cache=getattr(state, "cache", None),
        cache_ttl=settings.cache_ttl_clients,
    )


def get_forest_client_service(
    resolver: Annotated[ClientResolver, Depends(get_client_resolver)],
) -> ForestClientService:
    """Client detail, autocomplete and locations use cases."""
    return ForestClientService(resolver)
