"""Tests for Retry-After parsing, the circuit breaker and the retry policy."""

from datetime import datetime, timedelta, timezone

import pytest

from wastesearch.infrastructure.exceptions import (
    CircuitOpenException,
    UpstreamNotFoundException,
    UpstreamRateLimitedException,
    UpstreamRequestException,
    UpstreamUnavailableException,
)
from wastesearch.infrastructure.external.forest_client.resilience import (
    BreakerRegistry,
    BreakerState,
    CircuitBreaker,
    RetryPolicy,
    parse_retry_after,
)

NOW = datetime(2015, 10, 21, 7, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# ---- parse_retry_after ----


def test_retry_after_seconds() -> None:
    assert parse_retry_after("120") == timedelta(seconds=120)


def test_retry_after_http_date() -> None:
    parsed = parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", now=NOW)
    assert parsed == timedelta(minutes=28)


def test_retry_after_past_date_is_zero() -> None:
    assert parse_retry_after("Wed, 21 Oct 2015 06:00:00 GMT", now=NOW) == timedelta(0)


@pytest.mark.parametrize("value", [None, "", "   ", "soon", "-5", "1.5"])
def test_retry_after_unparseable_gives_none(value: str | None) -> None:
    assert parse_retry_after(value) is None


# ---- CircuitBreaker ----


def _breaker(clock: FakeClock, **kwargs) -> CircuitBreaker:
    options = dict(
        failure_rate_threshold=0.5,
        sliding_window_size=4,
        minimum_calls=4,
        open_seconds=30,
        half_open_max_calls=2,
        max_open_seconds=300,
    )
    options.update(kwargs)
    return CircuitBreaker("test", clock=clock, **options)


async def _fail() -> None:
    raise UpstreamUnavailableException("op", "boom", 503)


async def _ok() -> str:
    return "ok"


async def test_breaker_opens_at_failure_rate() -> None:
    clock = FakeClock()
    breaker = _breaker(clock)
    for fn in (_ok, _ok, _fail):
        try:
            await breaker.call(fn)
        except UpstreamUnavailableException:
            pass
    assert breaker.state is BreakerState.CLOSED
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    assert breaker.state is BreakerState.OPEN


async def test_open_breaker_fails_fast_without_calling() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, minimum_calls=1, sliding_window_size=1)
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    calls = []

    async def tracked() -> None:
        calls.append(1)

    with pytest.raises(CircuitOpenException):
        await breaker.call(tracked)
    assert calls == []


async def test_breaker_half_open_trial_calls_then_close() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, minimum_calls=1, sliding_window_size=1)
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    clock.now = 31
    assert breaker.state is BreakerState.HALF_OPEN
    assert await breaker.call(_ok) == "ok"
    assert breaker.state is BreakerState.HALF_OPEN
    assert await breaker.call(_ok) == "ok"
    assert breaker.state is BreakerState.CLOSED


async def test_breaker_half_open_failure_reopens() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, minimum_calls=1, sliding_window_size=1)
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    clock.now = 31
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    assert breaker.state is BreakerState.OPEN


def test_breaker_half_open_limits_trial_calls() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, half_open_max_calls=1, minimum_calls=1, sliding_window_size=1)
    breaker.record_failure()
    clock.now = 31
    breaker.acquire()
    with pytest.raises(CircuitOpenException):
        breaker.acquire()
    breaker.release()
    breaker.acquire()


async def test_not_found_and_rejections_count_as_success() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, minimum_calls=2, sliding_window_size=2)

    async def not_found() -> None:
        raise UpstreamNotFoundException("op", "1")

    async def rejected() -> None:
        raise UpstreamRequestException("op", 400)

    for fn in (not_found, rejected, not_found):
        with pytest.raises((UpstreamNotFoundException, UpstreamRequestException)):
            await breaker.call(fn)
    assert breaker.state is BreakerState.CLOSED


async def test_unclassified_errors_do_not_count_as_success() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, minimum_calls=1, sliding_window_size=1)
    with pytest.raises(UpstreamUnavailableException):
        await breaker.call(_fail)
    clock.now = 31

    async def broken() -> None:
        raise ValueError("bad payload")

    with pytest.raises(ValueError):
        await breaker.call(broken)
    assert await breaker.call(_ok) == "ok"
    # One real success is not enough to close after a neutral call.
    assert breaker.state is BreakerState.HALF_OPEN


async def test_rate_limit_holds_breaker_open_for_advisory() -> None:
    clock = FakeClock()
    breaker = _breaker(clock)

    async def limited() -> None:
        raise UpstreamRateLimitedException("op", timedelta(seconds=90))

    with pytest.raises(UpstreamRateLimitedException):
        await breaker.call(limited)
    assert breaker.state is BreakerState.OPEN
    clock.now = 60
    assert breaker.state is BreakerState.OPEN
    clock.now = 91
    assert breaker.state is BreakerState.HALF_OPEN


async def test_rate_limit_advisory_is_capped() -> None:
    clock = FakeClock()
    breaker = _breaker(clock, max_open_seconds=100)
    breaker.record_failure(hold_open=timedelta(hours=2))
    clock.now = 101
    assert breaker.state is BreakerState.HALF_OPEN


def test_registry_returns_one_breaker_per_name() -> None:
    registry = BreakerRegistry()
    assert registry.get("forest_client") is registry.get("forest_client")
    assert registry.get("forest_client") is not registry.get("other")


# ---- RetryPolicy ----


def test_backoff_grows_and_is_capped() -> None:
    policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=3.0)
    for attempt, base in ((1, 1.0), (2, 2.0), (3, 3.0), (4, 3.0)):
        delay = policy.backoff_delay(attempt)
        assert base * 0.75 <= delay <= base * 1.25


async def test_retry_succeeds_after_transient_failures(retry_policy: RetryPolicy) -> None:
    attempts = []

    async def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise UpstreamUnavailableException("op", "timeout")
        return "ok"

    assert await retry_policy.call("op", flaky) == "ok"
    assert len(attempts) == 3


async def test_retry_gives_up_after_max_attempts(retry_policy: RetryPolicy) -> None:
    attempts = []

    async def down() -> None:
        attempts.append(1)
        raise UpstreamUnavailableException("op", "boom", 503)

    with pytest.raises(UpstreamUnavailableException):
        await retry_policy.call("op", down)
    assert len(attempts) == retry_policy.max_attempts


@pytest.mark.parametrize(
    "exc",
    [
        UpstreamNotFoundException("op", "1"),
        UpstreamRequestException("op", 400),
        UpstreamRateLimitedException("op", None),
        CircuitOpenException("forest_client"),
    ],
)
async def test_terminal_errors_not_retried(retry_policy: RetryPolicy, exc: Exception) -> None:
    attempts = []

    async def fail() -> None:
        attempts.append(1)
        raise exc

    with pytest.raises(type(exc)):
        await retry_policy.call("op", fail)
    assert len(attempts) == 1
