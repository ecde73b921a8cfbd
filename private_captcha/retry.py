"""
Retry policy for verification calls, built on tenacity.

Provides:
- Error classification (retry transient faults, fail fast on permanent errors)
- Exponential backoff with jitter, capped, honouring server Retry-After hints
- Cancellation of the backoff sleep surfaced as RetriesExhaustedError
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from .constants import MIN_BACKOFF_MILLIS, RETRIABLE_STATUS_CODES
from .errors import HttpError, ResponseDecodeError, RetriesExhaustedError

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def is_retriable_status(status_code: int) -> bool:
    """True for 408, 429 and the 5xx statuses that signal a transient outage."""
    return status_code in RETRIABLE_STATUS_CODES


def is_retriable_error(exception: BaseException) -> bool:
    """
    Determine if a failed attempt should be retried.

    Retryable errors (transient failures):
    - Network errors (timeouts, DNS failures, refused or reset connections)
    - Unreadable 2xx response bodies
    - HTTP 408, 429, 500, 502, 503, 504

    Non-retryable errors (permanent failures):
    - Any other HTTP status (400, 401, 403, ...)
    - Anything else, including programming errors

    Args:
        exception: Exception raised by the attempt

    Returns:
        True if the attempt should be retried, False otherwise
    """
    if isinstance(exception, (httpx.RequestError, ResponseDecodeError)):
        return True

    if isinstance(exception, HttpError):
        return is_retriable_status(exception.status_code)

    return False


class JitteredBackoff(wait_base):
    """
    Exponential backoff with jitter, capped at ``max_backoff_millis``.

    The base delay starts at 500ms and grows as
    ``min(base * 2 + rand[0, max(1, base // 4)), cap)`` after every retry.
    A Retry-After hint from the previous HttpError can raise the delay taken
    for one retry (still capped) but never changes the base.
    """

    def __init__(self, max_backoff_millis: int, rng: Optional[random.Random] = None):
        self.max_backoff_millis = max_backoff_millis
        self.base_millis = MIN_BACKOFF_MILLIS
        self.rng = rng or random.Random()
        self.attempts_made = 0

    def next_delay_millis(self, last_error: Optional[BaseException]) -> int:
        delay = self.base_millis

        if isinstance(last_error, HttpError) and last_error.retry_after is not None:
            hint_millis = last_error.retry_after * 1000
            if hint_millis > delay:
                delay = min(hint_millis, self.max_backoff_millis)

        jitter = self.rng.randrange(max(1, self.base_millis // 4))
        self.base_millis = min(self.base_millis * 2 + jitter, self.max_backoff_millis)

        return delay

    def __call__(self, retry_state: RetryCallState) -> float:
        self.attempts_made = retry_state.attempt_number
        last_error = retry_state.outcome.exception() if retry_state.outcome else None
        return self.next_delay_millis(last_error) / 1000.0


def _log_retry_attempt(retry_state: RetryCallState):
    """Log the failed attempt and the delay before the next one."""
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0

    logger.warning(
        f"[private_captcha] Attempt {retry_state.attempt_number} failed: "
        f"{type(exception).__name__}: {str(exception)}, retrying in {delay:.3f}s"
    )


def _raise_retries_exhausted(retry_state: RetryCallState):
    last_error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.error(
        f"[private_captcha] Verification failed after {retry_state.attempt_number} attempts: "
        f"{type(last_error).__name__}"
    )
    raise RetriesExhaustedError(retry_state.attempt_number, last_error) from last_error


def verification_retrying(
    max_attempts: int,
    max_backoff_seconds: int,
    sleep: Optional[SleepFunc] = None,
    rng: Optional[random.Random] = None,
) -> AsyncRetrying:
    """
    Create a tenacity AsyncRetrying instance for one verification call.

    Usage:
        async for attempt in verification_retrying(5, 20):
            with attempt:
                return await do_exchange()

    Outcomes:
    - a successful attempt returns from the loop body
    - a non-retriable error is re-raised unchanged on the attempt it occurs
    - exhausting all attempts raises RetriesExhaustedError(max_attempts, last_error)
    - cancelling the backoff sleep raises RetriesExhaustedError with the
      cancellation as its cause

    Args:
        max_attempts: Total number of attempts, including the first
        max_backoff_seconds: Upper bound for any single backoff delay
        sleep: Awaitable sleep function, asyncio.sleep by default
        rng: Random source for jitter

    Returns:
        AsyncRetrying instance configured with the verification policy
    """
    sleep = sleep or asyncio.sleep
    backoff = JitteredBackoff(max_backoff_seconds * 1000, rng=rng)

    async def _sleep(seconds: float) -> None:
        try:
            await sleep(seconds)
        except asyncio.CancelledError as e:
            attempts = backoff.attempts_made + 1
            logger.warning(f"[private_captcha] Backoff interrupted before attempt {attempts}")
            raise RetriesExhaustedError(attempts, e) from e

    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=backoff,
        retry=retry_if_exception(is_retriable_error),
        before_sleep=_log_retry_attempt,
        sleep=_sleep,
        retry_error_callback=_raise_retries_exhausted,
    )
