"""Tests for the raw ASGI middlewares and the caller header parsing."""

import asyncio
import json

from wastesearch.core.config import get_settings
from wastesearch.middleware.caller_context import caller_from_headers
from wastesearch.middleware.request_context import sanitize_id
from wastesearch.middleware.timeout import TimeoutMiddleware


def _scope(headers: dict[str, str]) -> dict:
    return {
        "type": "http",
        "method": "GET",
        "path": "/x",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }


def test_caller_from_headers_restricted() -> None:
    caller = caller_from_headers(
        _scope(
            {
                "X-Caller-ID": "BCEID\\TESTER",
                "X-Caller-Provider": "bceidbusiness",
                "X-Caller-Clients": "00010004, 00070002,,",
            }
        ),
        get_settings(),
    )
    assert caller is not None
    assert caller.user_id == "BCEID\\TESTER"
    assert caller.authorized_clients == frozenset({"00010004", "00070002"})
    assert caller.unrestricted is False


def test_caller_from_headers_idir_is_unrestricted() -> None:
    caller = caller_from_headers(
        _scope({"X-Caller-ID": "IDIR\\JRYAN", "X-Caller-Provider": "idir"}), get_settings()
    )
    assert caller is not None and caller.unrestricted


def test_caller_from_headers_without_id() -> None:
    assert caller_from_headers(_scope({"X-Caller-Provider": "IDIR"}), get_settings()) is None


def test_sanitize_id() -> None:
    assert sanitize_id(" abc-123_X ") == "abc-123_X"
    assert sanitize_id("has space") is None
    assert sanitize_id("x" * 65) is None
    assert sanitize_id(None) is None


async def test_timeout_middleware_answers_504() -> None:
    async def slow_app(scope, receive, send) -> None:
        await asyncio.sleep(3600)

    sent: list[dict] = []

    async def send(message: dict) -> None:
        sent.append(message)

    app = TimeoutMiddleware(slow_app, timeout_seconds=0.01)
    await app(_scope({}), None, send)
    assert sent[0]["status"] == 504
    assert json.loads(sent[1]["body"])["error"] == "REQUEST_TIMEOUT"


async def test_timeout_middleware_passes_fast_responses() -> None:
    async def fast_app(scope, receive, send) -> None:
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"ok"})

    sent: list[dict] = []

    async def send(message: dict) -> None:
        sent.append(message)

    await TimeoutMiddleware(fast_app, timeout_seconds=5)(_scope({}), None, send)
    assert [m.get("status") for m in sent] == [200, None]
