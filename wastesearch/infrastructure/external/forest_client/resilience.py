"""Retry policy and circuit breaker for Forest Client API calls.

Both are plain objects composed around the raw call:
retry.call(op, lambda: breaker.call(raw_call)). Only
UpstreamUnavailableException is retried; an open breaker is never retried.
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import TypeVar

from wastesearch.core.config import Settings
from wastesearch.infrastructure.exceptions import (
    CircuitOpenException,
    UpstreamNotFoundException,
    UpstreamRateLimitedException,
    UpstreamRequestException,
    UpstreamUnavailableException,
)
from wastesearch.shared.telemetry import add_span_event
from wastesearch.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

R = TypeVar("R")


def parse_retry_after(value: str | None, now: datetime | None = None) -> timedelta | None:
    """Parse a Retry-After header into a duration.

    Accepts delta-seconds ("120") or an HTTP-date
    ("Wed, 21 Oct 2099 07:28:00 GMT", measured from now). Dates in the past
    give a zero duration. Anything else gives None.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.isdigit():
        return timedelta(seconds=int(value))
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.debug("Unparseable Retry-After header: %r", value)
        return None
    delta = ensure_utc(when) - (now or utc_now())
    return max(delta, timedelta(0))


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Count-based sliding-window circuit breaker for one upstream dependency.

    CLOSED records call outcomes in a window of the last sliding_window_size
    calls and opens when, after minimum_calls, the failure rate reaches
    failure_rate_threshold. OPEN rejects calls until open_seconds pass (or a
    rate-limit advisory, capped at max_open_seconds). HALF_OPEN admits
    half_open_max_calls probes: all succeeding closes the breaker, any
    failure re-opens it.

    Failures are UpstreamUnavailableException and UpstreamRateLimitedException.
    Not-found and other 4xx answers count as successes. Counters are guarded
    by a lock so one breaker can be shared by concurrent searches.
    """

    def __init__(
        self,
        name: str,
        failure_rate_threshold: float = 0.5,
        sliding_window_size: int = 10,
        minimum_calls: int = 5,
        open_seconds: float = 30.0,
        half_open_max_calls: int = 2,
        max_open_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.failure_rate_threshold = failure_rate_threshold
        self.minimum_calls = min(minimum_calls, sliding_window_size)
        self.open_seconds = open_seconds
        self.half_open_max_calls = half_open_max_calls
        self.max_open_seconds = max_open_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._window: deque[bool] = deque(maxlen=sliding_window_size)
        self._state = BreakerState.CLOSED
        self._open_until = 0.0
        self._half_open_in_flight = 0
        self._half_open_successes = 0

    @property
    def state(self) -> BreakerState:
        with self._lock:
            self._refresh()
            return self._state

    def _refresh(self) -> None:
        """Move OPEN to HALF_OPEN once the open period has passed. Lock held."""
        if self._state is BreakerState.OPEN and self._clock() >= self._open_until:
            self._state = BreakerState.HALF_OPEN
            self._half_open_in_flight = 0
            self._half_open_successes = 0
            logger.info("Circuit breaker %s half-open", self.name)

    def _open(self, seconds: float) -> None:
        """Lock held."""
        self._state = BreakerState.OPEN
        self._open_until = self._clock() + seconds
        self._window.clear()
        logger.warning("Circuit breaker %s opened for %.1fs", self.name, seconds)

    def _close(self) -> None:
        """Lock held."""
        self._state = BreakerState.CLOSED
        self._window.clear()
        logger.info("Circuit breaker %s closed", self.name)

    def acquire(self) -> None:
        """Take permission for one call.

        Raises:
            CircuitOpenException: breaker open, or half-open with no probe slot.
        """
        with self._lock:
            self._refresh()
            if self._state is BreakerState.OPEN:
                raise CircuitOpenException(self.name)
            if self._state is BreakerState.HALF_OPEN:
                if self._half_open_in_flight >= self.half_open_max_calls:
                    raise CircuitOpenException(self.name)
                self._half_open_in_flight += 1

    def release(self) -> None:
        """Give back a probe slot without recording an outcome (e.g. cancellation)."""
        with self._lock:
            if self._state is BreakerState.HALF_OPEN and self._half_open_in_flight > 0:
                self._half_open_in_flight -= 1

    def record_success(self) -> None:
        with self._lock:
            if self._state is BreakerState.HALF_OPEN:
                self._half_open_successes += 1
                if self._half_open_successes >= self.half_open_max_calls:
                    self._close()
                return
            if self._state is BreakerState.CLOSED:
                self._window.append(False)

    def record_failure(self, hold_open: timedelta | None = None) -> None:
        """Record a failed call; hold_open forces the breaker open for that long."""
        with self._lock:
            if hold_open is not None:
                seconds = min(hold_open.total_seconds(), self.max_open_seconds)
                self._open(seconds)
                return
            if self._state is BreakerState.HALF_OPEN:
                self._open(self.open_seconds)
                return
            if self._state is BreakerState.OPEN:
                return
            self._window.append(True)
            if len(self._window) >= self.minimum_calls:
                failure_rate = sum(self._window) / len(self._window)
                if failure_rate >= self.failure_rate_threshold:
                    self._open(self.open_seconds)

    async def call(self, fn: Callable[[], Awaitable[R]]) -> R:
        """Run fn through the breaker, recording its outcome."""
        self.acquire()
        try:
            result = await fn()
        except UpstreamRateLimitedException as e:
            self.record_failure(hold_open=e.retry_after)
            raise
        except UpstreamUnavailableException:
            self.record_failure()
            raise
        except (UpstreamNotFoundException, UpstreamRequestException):
            # Terminal upstream answers (404, other 4xx) mean the upstream is healthy.
            self.record_success()
            raise
        except BaseException:
            self.release()
            raise
        self.record_success()
        return result


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with capped exponential backoff and +/-25% jitter."""

    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 2.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number attempt (1-based)."""
        capped = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return capped * random.uniform(0.75, 1.25)

    async def call(self, operation: str, fn: Callable[[], Awaitable[R]]) -> R:
        """Run fn, retrying UpstreamUnavailableException up to max_attempts.

        CircuitOpenException and every other error propagate immediately.
        """
        attempt = 1
        while True:
            try:
                return await fn()
            except CircuitOpenException:
                raise
            except UpstreamUnavailableException as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        "Forest Client %s failed after %d attempts: %s",
                        operation,
                        attempt,
                        e.message,
                    )
                    raise
                delay = self.backoff_delay(attempt)
                logger.info(
                    "Forest Client %s retry %d/%d after %.2fs (%s)",
                    operation,
                    attempt,
                    self.max_attempts - 1,
                    delay,
                    e.message,
                )
                add_span_event("retry", {"operation": operation, "attempt": attempt})
                await self.sleep(delay)
                attempt += 1


class BreakerRegistry:
    """One CircuitBreaker per upstream dependency name (thread-safe)."""

    def __init__(self, factory: Callable[[str], CircuitBreaker] | None = None) -> None:
        self._factory = factory or CircuitBreaker
        self._breakers: dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> BreakerRegistry:
        def factory(name: str) -> CircuitBreaker:
            return CircuitBreaker(
                name,
                failure_rate_threshold=settings.breaker_failure_rate_threshold,
                sliding_window_size=settings.breaker_sliding_window_size,
                minimum_calls=settings.breaker_minimum_calls,
                open_seconds=settings.breaker_open_seconds,
                half_open_max_calls=settings.breaker_half_open_calls,
                max_open_seconds=settings.breaker_max_open_seconds,
            )

        return cls(factory)

    def get(self, name: str) -> CircuitBreaker:
        with self._lock:
            breaker = self._breakers.get(name)
            if breaker is None:
                breaker = self._breakers[name] = self._factory(name)
            return breaker
