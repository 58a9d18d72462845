"""Code list repository and service tests with a mocked AsyncSession."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from wastesearch.application.dtos.search import CodeDescription
from wastesearch.application.use_cases.codes import CodesService
from wastesearch.domain.exceptions import SearchUnavailableException
from wastesearch.infrastructure.persistence.repositories import CodesRepository


def _rows(*pairs: tuple[str, str | None]) -> MagicMock:
    result = MagicMock()
    result.mappings.return_value.all.return_value = [
        {"code": code, "description": description} for code, description in pairs
    ]
    return result


async def test_districts_bind_configured_codes() -> None:
    db = AsyncMock()
    db.execute.return_value = _rows(("DCK", "Chilliwack Natural Resource District"))
    districts = await CodesRepository(db).districts(("DCK", "DMH"))
    assert districts == [CodeDescription("DCK", "Chilliwack Natural Resource District")]
    stmt, params = db.execute.await_args.args
    assert params == {"codes": ["DCK", "DMH"]}
    assert "ORDER BY org_unit_code" in str(stmt)


@pytest.mark.parametrize(
    ("method", "table"),
    [
        ("sampling_options", "waste_sampling_option_code"),
        ("assess_area_statuses", "waste_assess_area_sts_code"),
    ],
)
async def test_code_tables_only_current_codes(method: str, table: str) -> None:
    db = AsyncMock()
    db.execute.return_value = _rows(("A", "Alpha"), ("B", None))
    codes = await getattr(CodesRepository(db), method)()
    assert codes == [CodeDescription("A", "Alpha"), CodeDescription("B", None)]
    sql = str(db.execute.await_args.args[0])
    assert f"FROM {table}" in sql
    assert "expiry_date IS NULL OR expiry_date > CURRENT_TIMESTAMP" in sql
    assert "effective_date <= CURRENT_TIMESTAMP" in sql


async def test_code_table_failure_is_unavailable() -> None:
    db = AsyncMock()
    db.execute.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
    with pytest.raises(SearchUnavailableException):
        await CodesRepository(db).sampling_options()


async def test_service_strips_district_suffix() -> None:
    repo = AsyncMock()
    repo.districts.return_value = [
        CodeDescription("DCK", "Chilliwack Natural Resource District"),
        CodeDescription("DXX", None),
    ]
    service = CodesService(repo, ("DCK", "DXX"))
    assert await service.districts() == [
        CodeDescription("DCK", "Chilliwack"),
        CodeDescription("DXX", None),
    ]
    repo.districts.assert_awaited_once_with(("DCK", "DXX"))


async def test_service_without_configured_districts_asks_for_all() -> None:
    repo = AsyncMock()
    repo.districts.return_value = []
    await CodesService(repo).districts()
    repo.districts.assert_awaited_once_with(("NOVALUE",))
