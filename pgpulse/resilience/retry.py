from __future__ import annotations

from typing import Any

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)
from tenacity.retry import retry_base
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from .config import RetryConfig
from .types import AsyncSleep, BeforeSleepCallback, RetryPredicate


def build_stop(config: RetryConfig) -> stop_base:
    return stop_after_attempt(config.max_attempts)


def build_wait(config: RetryConfig) -> wait_base:
    return wait_fixed(config.delay_seconds)


def build_retry_condition(predicate: RetryPredicate | None = None) -> retry_base:
    # Only Exception subclasses are retried; CancelledError and friends pass through.
    condition: retry_base = retry_if_exception_type(Exception)
    if predicate is not None:
        condition = condition & retry_if_exception(predicate)
    return condition


def build_async_retrying(
    config: RetryConfig,
    *,
    predicate: RetryPredicate | None = None,
    before_sleep: BeforeSleepCallback | None = None,
    sleep: AsyncSleep | None = None,
) -> AsyncRetrying:
    """Build an `AsyncRetrying` iterator for hand-written attempt loops.

    Parameters
    ----------
    config
        Attempt ceiling and fixed delay.
    predicate
        Extra filter on the raised exception; False stops retrying at once.
    before_sleep
        Called after a failed attempt when another one is scheduled.
    sleep
        Coroutine used to wait between attempts. Defaults to `asyncio.sleep`.
    """
    kwargs: dict[str, Any] = {}
    if sleep is not None:
        kwargs["sleep"] = sleep

    return AsyncRetrying(
        stop=build_stop(config),
        wait=build_wait(config),
        retry=build_retry_condition(predicate),
        before_sleep=before_sleep,
        reraise=config.reraise,
        **kwargs,
    )
