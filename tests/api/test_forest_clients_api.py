"""Forest Client endpoint tests against a mocked registry (httpx.MockTransport)."""

import httpx
import pytest
from httpx import AsyncClient

from wastesearch.api.v1.dependencies import get_client_resolver
from wastesearch.main import app

ACME = {
    "clientNumber": "00010004",
    "clientName": "ACME FORESTRY LTD.",
    "clientStatusCode": "ACT",
    "clientTypeCode": "C",
    "acronym": "ACME",
}
BOREAL = {
    "clientNumber": "00070002",
    "clientName": "BOREAL TIMBER",
    "clientStatusCode": "ACT",
    "clientTypeCode": "C",
    "acronym": "BT",
}


def _registry(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/clients/findByClientNumber/00010004"):
        return httpx.Response(200, json=ACME)
    if path.startswith("/api/clients/findByClientNumber/"):
        return httpx.Response(404)
    if path.endswith("/clients/search/by"):
        return httpx.Response(200, json=[ACME, BOREAL], headers={"X-Total-Count": "2"})
    if path.endswith("/clients/search"):
        wanted = set(request.url.params.get_list("id"))
        return httpx.Response(200, json=[c for c in (ACME, BOREAL) if c["clientNumber"] in wanted])
    if path.endswith("/clients/00010004/locations"):
        return httpx.Response(
            200,
            json=[
                {"clientNumber": "00010004", "locationCode": "00", "locationName": "Main Office"},
                {"clientNumber": "00010004", "locationCode": "01", "locationName": None},
            ],
        )
    return httpx.Response(500)


@pytest.fixture
def registry_calls(make_resolver):
    resolver, seen = make_resolver(_registry)
    app.dependency_overrides[get_client_resolver] = lambda: resolver
    yield seen
    app.dependency_overrides.pop(get_client_resolver, None)


async def test_get_client(
    client: AsyncClient, registry_calls: list, idir_headers: dict[str, str]
) -> None:
    response = await client.get("/api/v1/forest-clients/10004", headers=idir_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["clientNumber"] == "00010004"
    assert data["name"] == "ACME FORESTRY LTD."
    assert data["clientStatusCode"] == {"code": "ACT", "description": "Active"}
    assert data["clientTypeCode"] == {"code": "C", "description": "Corporation"}


async def test_get_unknown_client_is_404(
    client: AsyncClient, registry_calls: list, idir_headers: dict[str, str]
) -> None:
    response = await client.get("/api/v1/forest-clients/99", headers=idir_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_client_endpoints_require_caller(client: AsyncClient, registry_calls: list) -> None:
    response = await client.get("/api/v1/forest-clients/10004")
    assert response.status_code == 401
    assert registry_calls == []


async def test_autocomplete_unrestricted(
    client: AsyncClient, registry_calls: list, idir_headers: dict[str, str]
) -> None:
    response = await client.get(
        "/api/v1/forest-clients/byNameAcronymNumber",
        params={"value": "acme"},
        headers=idir_headers,
    )
    assert response.status_code == 200
    assert response.json() == [
        {"id": "00010004", "name": "ACME FORESTRY LTD.", "acronym": "ACME"},
        {"id": "00070002", "name": "BOREAL TIMBER", "acronym": "BT"},
    ]
    assert registry_calls[0].url.params["size"] == "10"


async def test_autocomplete_restricted_filters_and_widens_page(
    client: AsyncClient, registry_calls: list, bceid_headers: dict[str, str]
) -> None:
    response = await client.get(
        "/api/v1/forest-clients/byNameAcronymNumber",
        params={"value": "a", "size": 5},
        headers=bceid_headers,
    )
    assert response.status_code == 200
    assert [hit["id"] for hit in response.json()] == ["00010004"]
    assert registry_calls[0].url.params["size"] == "100"


async def test_autocomplete_restricted_without_clients_is_empty(
    client: AsyncClient, registry_calls: list
) -> None:
    headers = {"X-Caller-ID": "BCEID\\NOBODY", "X-Caller-Provider": "BCEIDBUSINESS"}
    response = await client.get(
        "/api/v1/forest-clients/byNameAcronymNumber",
        params={"value": "acme"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == []
    assert registry_calls == []


async def test_locations_default_description(
    client: AsyncClient, registry_calls: list, idir_headers: dict[str, str]
) -> None:
    response = await client.get(
        "/api/v1/forest-clients/00010004/locations", headers=idir_headers
    )
    assert response.status_code == 200
    assert response.json() == [
        {"code": "00", "description": "Main Office"},
        {"code": "01", "description": "No name provided"},
    ]


async def test_search_by_numbers_single_call(
    client: AsyncClient, registry_calls: list, idir_headers: dict[str, str]
) -> None:
    response = await client.get(
        "/api/v1/forest-clients/searchByNumbers",
        params=[("values", "00010004"), ("values", "70002")],
        headers=idir_headers,
    )
    assert response.status_code == 200
    assert sorted(c["clientNumber"] for c in response.json()) == ["00010004", "00070002"]
    assert len(registry_calls) == 1
