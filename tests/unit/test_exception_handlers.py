"""Tests for mapping exceptions to HTTP responses."""

import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from wastesearch.core.exception_handlers import _wastesearch_exception_handler
from wastesearch.domain.exceptions import (
    ForbiddenException,
    InvalidSortFieldException,
    SearchTimeoutException,
    SearchUnavailableException,
)
from wastesearch.infrastructure.exceptions import (
    CircuitOpenException,
    UpstreamRateLimitedException,
    UpstreamRequestException,
)


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (InvalidSortFieldException("x"), 400),
        (ForbiddenException(["1"]), 403),
        (SearchUnavailableException(), 503),
        (SearchTimeoutException(30), 504),
        (CircuitOpenException("forest_client"), 503),
        (UpstreamRequestException("op", 418), 502),
    ],
)
def test_status_mapping(exc, status: int) -> None:
    response = _wastesearch_exception_handler(MagicMock(), exc)
    assert response.status_code == status
    assert json.loads(response.body)["error"] == exc.error_code


def test_rate_limited_sets_retry_after_header() -> None:
    exc = UpstreamRateLimitedException("op", timedelta(seconds=42))
    response = _wastesearch_exception_handler(MagicMock(), exc)
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "42"


def test_rate_limited_without_advisory_has_no_header() -> None:
    response = _wastesearch_exception_handler(MagicMock(), UpstreamRateLimitedException("op"))
    assert "Retry-After" not in response.headers
