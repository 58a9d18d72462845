"""Code list endpoint tests (repository mocked, no database)."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from wastesearch.api.v1.dependencies import get_codes_service
from wastesearch.application.dtos.search import CodeDescription
from wastesearch.application.use_cases.codes import CodesService
from wastesearch.domain.exceptions import SearchUnavailableException
from wastesearch.main import app


@pytest.fixture
def repo() -> AsyncMock:
    repo = AsyncMock()
    repo.districts.return_value = [
        CodeDescription("DCK", "Chilliwack Natural Resource District")
    ]
    repo.sampling_options.return_value = [CodeDescription("OCU", "Ocular")]
    repo.assess_area_statuses.return_value = [
        CodeDescription("DRF", "Draft"),
        CodeDescription("SUB", "Submitted"),
    ]
    return repo


@pytest.fixture(autouse=True)
def _override_codes_service(repo: AsyncMock):
    service = CodesService(repo, ("DCK",))
    app.dependency_overrides[get_codes_service] = lambda: service
    yield
    app.dependency_overrides.pop(get_codes_service, None)


async def test_districts(client: AsyncClient, idir_headers: dict[str, str]) -> None:
    response = await client.get("/api/v1/codes/districts", headers=idir_headers)
    assert response.status_code == 200
    assert response.json() == [{"code": "DCK", "description": "Chilliwack"}]


async def test_samplings(client: AsyncClient, bceid_headers: dict[str, str]) -> None:
    response = await client.get("/api/v1/codes/samplings", headers=bceid_headers)
    assert response.status_code == 200
    assert response.json() == [{"code": "OCU", "description": "Ocular"}]


async def test_assess_area_statuses(
    client: AsyncClient, idir_headers: dict[str, str]
) -> None:
    response = await client.get("/api/v1/codes/assess-area-statuses", headers=idir_headers)
    assert [c["code"] for c in response.json()] == ["DRF", "SUB"]


@pytest.mark.parametrize("path", ["districts", "samplings", "assess-area-statuses"])
async def test_codes_require_caller(client: AsyncClient, repo: AsyncMock, path: str) -> None:
    response = await client.get(f"/api/v1/codes/{path}")
    assert response.status_code == 401
    repo.districts.assert_not_awaited()


async def test_code_table_failure_is_503(
    client: AsyncClient, repo: AsyncMock, idir_headers: dict[str, str]
) -> None:
    repo.sampling_options.side_effect = SearchUnavailableException()
    response = await client.get("/api/v1/codes/samplings", headers=idir_headers)
    assert response.status_code == 503
