"""ReportingUnitEnricher tests with a fake resolver and against a mocked registry."""

import asyncio

import httpx
import pytest

from wastesearch.application.dtos.forest_client import ClientLocationRecord, ClientRecord
from wastesearch.application.dtos.search import CodeDescription, Page
from wastesearch.application.services.enrichment import ReportingUnitEnricher
from wastesearch.application.services.row_mapper import to_result
from wastesearch.domain.enums import ClientType
from wastesearch.infrastructure.external.forest_client.api import ForestClientApi
from wastesearch.infrastructure.external.forest_client.resilience import (
    CircuitBreaker,
    RetryPolicy,
)
from wastesearch.infrastructure.external.forest_client.resolver import ClientResolver


class FakeResolver:
    """Records calls; resolves only the clients it knows."""

    def __init__(self, clients: dict[str, ClientRecord], locations: dict[str, list]) -> None:
        self.clients = clients
        self.locations = locations
        self.batch_calls: list[list[str]] = []
        self.location_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search_by_numbers(self, client_numbers, name=None):
        self.batch_calls.append(list(client_numbers))
        return [self.clients[n] for n in client_numbers if n in self.clients]

    async def fetch_locations(self, client_number):
        self.location_calls.append(client_number)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return self.locations.get(client_number, [])


def _page(rows) -> Page:
    results = tuple(to_result(r) for r in rows)
    return Page(content=results, total_elements=len(results), page_number=0, page_size=10)


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver(
        clients={
            "00010004": ClientRecord("00010004", client_name="ACME FORESTRY LTD."),
            "00070002": ClientRecord(
                "00070002",
                client_name="DOE",
                legal_first_name="JANE",
                client_type=ClientType.INDIVIDUAL,
            ),
        },
        locations={
            "00010004": [
                ClientLocationRecord("00010004", "00", location_name="Main Office"),
                ClientLocationRecord("00010004", "01", location_name="Mill"),
            ],
        },
    )


async def test_batches_by_distinct_client(resolver: FakeResolver, make_row) -> None:
    rows = [
        make_row(1, "00010004", client_location="00"),
        make_row(2, "00070002"),
        make_row(3, "00010004", client_location="01"),
        make_row(4, "00010004", client_location="00"),
    ]
    enriched = await ReportingUnitEnricher(resolver).enrich(_page(rows))

    assert resolver.batch_calls == [["00010004", "00070002"]]
    assert sorted(resolver.location_calls) == ["00010004", "00070002"]
    assert [r.client.description for r in enriched.content] == [
        "ACME FORESTRY LTD.",
        "JANE DOE",
        "ACME FORESTRY LTD.",
        "ACME FORESTRY LTD.",
    ]
    assert [r.client_location.description for r in enriched.content] == [
        "Main Office",
        None,
        "Mill",
        "Main Office",
    ]


async def test_preserves_order_and_totals(resolver: FakeResolver, make_row) -> None:
    rows = [make_row(n, "00070002" if n % 2 else "00010004") for n in (5, 3, 9, 1)]
    page = _page(rows)
    enriched = await ReportingUnitEnricher(resolver).enrich(page)
    assert [r.ru_number for r in enriched.content] == [5, 3, 9, 1]
    assert enriched.total_elements == page.total_elements


async def test_unresolved_client_keeps_code(resolver: FakeResolver, make_row) -> None:
    enriched = await ReportingUnitEnricher(resolver).enrich(_page([make_row(1, "00099999")]))
    row = enriched.content[0]
    assert row.client == CodeDescription("00099999", None)
    assert row.client_location == CodeDescription("00", None)


async def test_rows_without_client_skip_lookups(resolver: FakeResolver, make_row) -> None:
    page = _page([make_row(1, None), make_row(2, None)])
    enriched = await ReportingUnitEnricher(resolver).enrich(page)
    assert enriched is page
    assert resolver.batch_calls == []
    assert resolver.location_calls == []


async def test_location_lookups_bounded(make_row) -> None:
    numbers = [f"{n:08d}" for n in range(1, 9)]
    resolver = FakeResolver(clients={}, locations={})
    rows = [make_row(i, n) for i, n in enumerate(numbers, start=1)]
    await ReportingUnitEnricher(resolver, max_concurrency=2).enrich(_page(rows))
    assert len(resolver.location_calls) == 8
    assert resolver.max_in_flight <= 2


async def test_cancellation_propagates(make_row) -> None:
    class HangingResolver(FakeResolver):
        async def fetch_locations(self, client_number):
            await asyncio.sleep(3600)

    enricher = ReportingUnitEnricher(HangingResolver({}, {}))
    task = asyncio.create_task(enricher.enrich(_page([make_row(1)])))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


async def _no_sleep(_: float) -> None:
    return None


def _registry(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://forest-client.test/api"
    )


def _real_resolver(http: httpx.AsyncClient) -> ClientResolver:
    return ClientResolver(
        ForestClientApi(http),
        RetryPolicy(sleep=_no_sleep),
        CircuitBreaker("forest_client", minimum_calls=100, sliding_window_size=100),
    )


async def test_registry_outage_keeps_every_row(make_row) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(503)

    rows = [
        make_row(1, "00010004"),
        make_row(2, "00070002"),
        make_row(3, "00012797"),
        make_row(4, "00010004"),
    ]
    async with _registry(handler) as http:
        enriched = await ReportingUnitEnricher(_real_resolver(http)).enrich(_page(rows))

    assert [r.ru_number for r in enriched.content] == [1, 2, 3, 4]
    assert all(r.client.description is None for r in enriched.content)
    assert all(r.client_location.description is None for r in enriched.content)
    batched = [r for r in seen if r.url.path.endswith("/clients/search")]
    # One batched lookup, sent max_attempts (3) times by the default retry policy.
    assert len(batched) == 3
    assert {tuple(r.url.params.get_list("id")) for r in batched} == {
        ("00010004", "00070002", "00012797")
    }


@pytest.mark.parametrize(
    "locations_body",
    [
        {"content": []},
        [{"clientNumber": "00010004", "locationCode": "00",
          "returnedMailDate": "2020-01-01T00:00:00"}],
    ],
)
async def test_unexpected_registry_bodies_do_not_fail_the_page(
    make_row, locations_body
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/locations"):
            return httpx.Response(200, json=locations_body)
        return httpx.Response(200, json={"content": []})

    async with _registry(handler) as http:
        enriched = await ReportingUnitEnricher(_real_resolver(http)).enrich(
            _page([make_row(1, "00010004")])
        )

    row = enriched.content[0]
    assert row.client == CodeDescription("00010004", None)
    assert row.client_location == CodeDescription("00", None)
