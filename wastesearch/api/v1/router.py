"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from wastesearch.api.v1.dependencies.
"""

from fastapi import APIRouter

from wastesearch.api.v1.endpoints import codes, forest_clients, health, search

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(codes.router, prefix="/codes", tags=["codes"])
api_router.include_router(
    forest_clients.router, prefix="/forest-clients", tags=["forest-clients"]
)
