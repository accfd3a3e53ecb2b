"""Database connectivity probe with bounded retry.

The probe runs a trivial liveness query and answers one question: can the
database be reached right now? It never raises for database failures. Every
failure is logged and folded into a ``False`` result once retries are spent.

Retry policy
------------
- Attempts are strictly sequential; attempt N+1 starts only after attempt N
  has failed and the fixed delay has passed.
- Failures classified as transient or unknown are retried up to
  ``max_attempts``. Authentication timeouts are transient and get their own
  log label.
- Permanent failures (bad credentials, unknown database, misconfiguration)
  end the probe at once.

Cancellation
------------
Cancelling the calling task propagates `asyncio.CancelledError` as usual.
Setting the optional ``shutdown`` event aborts a pending retry wait and the
probe returns ``False`` without issuing another query.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol

from tenacity import RetryCallState, RetryError

from .config.probe import ProbeConfig
from .core.exceptions import ProbeAbortedError
from .logger import get_logger
from .resilience.classify import classify_failure
from .resilience.retry import build_async_retrying

if TYPE_CHECKING:
    from .resilience.types import AsyncSleep

logger = get_logger(__name__)


class LivenessTarget(Protocol):
    """Anything that can run a scalar query, e.g. `AsyncConnectionPool`."""

    async def afetchval(self, query: str, *args: object, timeout: float | None = None) -> Any: ...


class ConnectivityProber:
    """Check that a database answers a liveness query.

    Parameters
    ----------
    target
        Pool (or any `LivenessTarget`) to run the query against.
    config
        Attempt ceiling, delay, per-attempt timeout and retryable kinds.
    sleep
        Coroutine used for the wait between attempts. Tests inject a fake.
    shutdown
        Event that, once set, stops the probe before its next attempt.

    Examples
    --------
    >>> prober = ConnectivityProber(pool)
    >>> if not await prober.aprobe():
    ...     logger.error("Database unreachable")
    """

    __slots__ = ("_config", "_shutdown", "_sleep", "_target")

    def __init__(
        self,
        target: LivenessTarget,
        config: ProbeConfig | None = None,
        *,
        sleep: AsyncSleep | None = None,
        shutdown: asyncio.Event | None = None,
    ) -> None:
        self._target = target
        self._config = config or ProbeConfig()
        self._sleep = sleep or asyncio.sleep
        self._shutdown = shutdown

    @property
    def config(self) -> ProbeConfig:
        return self._config

    async def aprobe(self) -> bool:
        """Run the liveness query with bounded retry.

        Returns
        -------
        bool
            True on the first successful attempt, False once attempts are
            exhausted, a permanent failure is seen, or shutdown is requested.
        """
        attempts = 0
        try:
            async for attempt in build_async_retrying(
                self._config.retry,
                predicate=self._should_retry,
                before_sleep=self._log_retry_scheduled,
                sleep=self._await_retry_delay,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    await self._attempt(attempts)
        except ProbeAbortedError:
            logger.warning("Database connection test aborted by shutdown", attempts=attempts)
            return False
        except RetryError as e:
            self._log_gave_up(e.last_attempt.exception() or e, attempts)
            return False
        except Exception as e:
            self._log_gave_up(e, attempts)
            return False

        return True

    def _log_gave_up(self, exc: BaseException, attempts: int) -> None:
        failure = classify_failure(exc)
        event = (
            "Database connection failed with a non-retryable error"
            if failure.kind not in self._config.retry_on
            else "Database connection failed after all retries"
        )
        logger.error(
            event,
            attempts=attempts,
            max_attempts=self._config.max_attempts,
            kind=failure.kind,
            reason=failure.reason,
            error=failure.message,
        )

    async def _attempt(self, attempt_number: int) -> None:
        if self._shutdown is not None and self._shutdown.is_set():
            raise ProbeAbortedError("Shutdown requested before attempt")

        try:
            async with asyncio.timeout(self._config.attempt_timeout_seconds):
                await self._target.afetchval(self._config.query)
        except Exception as e:
            failure = classify_failure(e)
            logger.warning(
                "Database connection test failed",
                attempt=attempt_number,
                max_attempts=self._config.max_attempts,
                kind=failure.kind,
                reason=failure.reason,
                sqlstate=failure.sqlstate,
                error=failure.message,
            )
            raise

        logger.info("Database connection test successful", attempt=attempt_number)

    def _should_retry(self, exc: BaseException) -> bool:
        if isinstance(exc, ProbeAbortedError) or not isinstance(exc, Exception):
            return False
        return classify_failure(exc).kind in self._config.retry_on

    def _log_retry_scheduled(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else self._config.retry_delay_seconds
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        failure = classify_failure(exc) if exc is not None else None
        logger.info(
            "Retrying database connection",
            attempt=retry_state.attempt_number,
            delay_s=delay,
            auth_timeout=failure.is_auth_timeout if failure else False,
        )

    async def _await_retry_delay(self, seconds: float) -> None:
        if self._shutdown is None:
            await self._sleep(seconds)
            return

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        watcher = asyncio.ensure_future(self._shutdown.wait())
        try:
            await asyncio.wait((sleeper, watcher), return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            watcher.cancel()

        if self._shutdown.is_set():
            raise ProbeAbortedError("Shutdown requested during retry delay")


async def atest_database_connection(
    target: LivenessTarget,
    config: ProbeConfig | None = None,
    *,
    shutdown: asyncio.Event | None = None,
) -> bool:
    """Probe ``target`` once with the default (or given) retry policy."""
    return await ConnectivityProber(target, config, shutdown=shutdown).aprobe()
