# SPDX-License-Identifier: MIT
"""Retry policy for Kusto executions.

The policy re-runs a coroutine factory after a failure, waiting between
attempts according to a delay function. Which failures are retried is decided
by a predicate that defaults to retrying every ``Exception``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import logfire

from .errors import ExecutionCancelledError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def always_retry(exc: Exception) -> bool:
    """Treat every failure as transient."""
    return True


def exponential_delay(base: float, attempt: int) -> float:
    """Return ``base ** attempt`` seconds for the 0-indexed retry ``attempt``."""
    return float(base**attempt)


def _raise_if_cancelled(
    cancel_event: asyncio.Event | None, cause: Exception | None
) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ExecutionCancelledError("Execution cancelled") from cause


async def _wait(sleep: Sleep, delay: float, cancel_event: asyncio.Event | None) -> None:
    """Sleep for ``delay`` seconds, returning early once ``cancel_event`` is set."""
    if cancel_event is None:
        await sleep(delay)
        return
    sleeper = asyncio.ensure_future(sleep(delay))
    watcher = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({sleeper, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleeper, watcher):
            task.cancel()
        await asyncio.gather(sleeper, watcher, return_exceptions=True)
    if not sleeper.cancelled() and sleeper.exception() is not None:
        raise sleeper.exception()


@dataclass
class RetryPolicy:
    """Sequential retry with a pluggable delay schedule.

    Attributes:
        retries: Number of retries after the initial attempt.
        delay: Maps the 0-indexed retry number to a wait in seconds. It is
            evaluated lazily so callers may change the schedule between calls.
        retry_on: Predicate deciding whether a failure should be retried.
        sleep: Coroutine used to wait between attempts; ``asyncio.sleep`` when
            unset.
    """

    retries: int
    delay: Callable[[int], float]
    retry_on: Callable[[Exception], bool] = always_retry
    sleep: Sleep | None = None

    @property
    def attempts(self) -> int:
        """Total number of attempts including the first one."""
        return self.retries + 1

    async def execute(
        self,
        coro_factory: Callable[[], Awaitable[T]],
        *,
        cancel_event: asyncio.Event | None = None,
        operation: str = "kusto.request",
    ) -> T:
        """Run ``coro_factory`` until it succeeds or the budget is spent.

        The last failure is re-raised unchanged. ``cancel_event`` is checked
        before each attempt and cuts a backoff wait short once set; an attempt
        that is already running is never interrupted.

        Raises:
            ExecutionCancelledError: If ``cancel_event`` is set between
                attempts.
        """
        sleep = self.sleep or asyncio.sleep
        last_exc: Exception | None = None
        for attempt in range(self.attempts):
            _raise_if_cancelled(cancel_event, last_exc)
            try:
                return await coro_factory()
            except Exception as exc:
                if not self.retry_on(exc):
                    logfire.error(
                        "Kusto request failed with non-retryable error",
                        operation=operation,
                        attempt=attempt + 1,
                        error=type(exc).__name__,
                    )
                    raise
                if attempt >= self.retries:
                    logfire.error(
                        "Kusto request failed after retries",
                        operation=operation,
                        attempts=attempt + 1,
                        error=type(exc).__name__,
                    )
                    raise
                last_exc = exc
                wait = float(self.delay(attempt))
                logfire.warning(
                    "Retrying Kusto request",
                    operation=operation,
                    attempt=attempt + 1,
                    backoff_delay=wait,
                    error=type(exc).__name__,
                )
                _raise_if_cancelled(cancel_event, exc)
                await _wait(sleep, wait, cancel_event)
                _raise_if_cancelled(cancel_event, exc)
        raise RuntimeError("Unreachable retry state")


__all__ = ["RetryPolicy", "always_retry", "exponential_delay"]
