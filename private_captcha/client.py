"""
Private Captcha client for server-side verification of puzzle solutions.

Example:
    settings = PrivateCaptchaSettings(api_key="pc_your_api_key")

    async with PrivateCaptchaClient(settings) as client:
        result = await client.verify(VerificationRequest(solution=solution))
        if result.ok():
            ...  # captcha verified
        else:
            ...  # rejected: result.error_message
"""

import logging
import random
from typing import Callable, Optional

import httpx

from .config import PrivateCaptchaSettings
from .constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF_SECONDS,
    HEADER_API_KEY,
    HEADER_CONTENT_TYPE,
    HEADER_RETRY_AFTER,
    HEADER_SITEKEY,
    HEADER_TRACE_ID,
    HEADER_USER_AGENT,
    USER_AGENT,
)
from .decoder import decode_verify_response
from .errors import HttpError, InvalidArgumentError
from .models import VerificationRequest, VerificationResult
from .retry import SleepFunc, verification_retrying

logger = logging.getLogger(__name__)

# Reads a form field by name; returns None when the field is absent
FormFieldLookup = Callable[[str], Optional[str]]


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header holding whole seconds; anything else yields None."""
    if not value:
        return None
    value = value.strip()
    # Plain ASCII digits only; int() would also take "+5", "3_0" and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class PrivateCaptchaClient:
    """Client for the Private Captcha verification API."""

    def __init__(
        self,
        settings: PrivateCaptchaSettings,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            settings: Client configuration; api_key must be non-empty
            http_client: Optional shared httpx client; not closed by this client
            sleep: Awaitable used for backoff delays (asyncio.sleep by default)
            rng: Random source for backoff jitter

        Raises:
            InvalidArgumentError: If the API key is empty
        """
        if not settings.api_key:
            raise InvalidArgumentError("API key cannot be empty")

        self.endpoint = settings.endpoint
        self._api_key = settings.api_key
        self._form_field = settings.form_field
        self._failed_status_code = settings.failed_status_code
        self._sleep = sleep
        self._rng = rng

        self._timeout = settings.timeout
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=self._timeout)
        self._http_client = http_client

        logger.debug(
            f"PrivateCaptchaClient initialized - Endpoint: {self.endpoint}, "
            f"API key prefix: {self._api_key[:4]}..."
        )

    @property
    def form_field(self) -> str:
        return self._form_field

    @property
    def failed_status_code(self) -> int:
        return self._failed_status_code

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "PrivateCaptchaClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def verify_request(self, lookup: Optional[FormFieldLookup]) -> VerificationResult:
        """
        Verify the solution posted in the configured form field.

        Args:
            lookup: Reads a form field by name from the caller's inbound
                request, returning None when the field is absent

        Returns:
            VerificationResult of the verification

        Raises:
            InvalidArgumentError: If lookup is None or the field is empty
            HttpError: If the API returns a non-retriable status
            RetriesExhaustedError: If all attempts failed
        """
        if lookup is None:
            raise InvalidArgumentError("Form field lookup cannot be None")

        solution = lookup(self._form_field) or ""
        return await self.verify(VerificationRequest(solution=solution))

    async def verify(self, request: VerificationRequest) -> VerificationResult:
        """
        Verify a captcha solution, retrying transient failures with backoff.

        Args:
            request: Solution, optional sitekey and retry limits

        Returns:
            VerificationResult with the attempt count and trace id attached.
            Check ``ok()``: a processed but rejected solution is not an error.

        Raises:
            InvalidArgumentError: If the solution is empty
            HttpError: If the API returns a non-retriable status
            RetriesExhaustedError: If all attempts failed on transient errors,
                or the backoff sleep was cancelled

        Cancelling the task during a backoff sleep ends the call with
        RetriesExhaustedError (cause: the CancelledError) instead of
        propagating the cancellation. The task's cancellation request is not
        withdrawn (no ``Task.uncancel()``), so under ``asyncio.timeout()`` or a
        ``TaskGroup`` on Python 3.11+ the caller sees RetriesExhaustedError
        rather than TimeoutError. Wrap the call and check
        ``isinstance(err.last_error, asyncio.CancelledError)`` to tell the
        two apart.
        """
        if not request.solution:
            raise InvalidArgumentError("Solution cannot be empty")

        max_attempts = request.max_attempts if request.max_attempts > 0 else DEFAULT_MAX_ATTEMPTS
        max_backoff_seconds = (
            request.max_backoff_seconds
            if request.max_backoff_seconds > 0
            else DEFAULT_MAX_BACKOFF_SECONDS
        )

        logger.debug(
            f"Starting verification: max_attempts={max_attempts}, "
            f"max_backoff={max_backoff_seconds}s"
        )

        async for attempt in verification_retrying(
            max_attempts, max_backoff_seconds, sleep=self._sleep, rng=self._rng
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                result = await self._do_verify(request.solution, request.sitekey)
                logger.debug(f"Verification completed on attempt {attempt_number}")
                return result.with_attempts(attempt_number)

    async def _do_verify(self, solution: str, sitekey: str) -> VerificationResult:
        """
        Perform one POST to the verify endpoint.

        Raises:
            HttpError: For any status code >= 300
            ResponseDecodeError: If a 2xx body cannot be decoded
            httpx.RequestError: For network failures
        """
        headers = {
            HEADER_API_KEY: self._api_key,
            HEADER_USER_AGENT: USER_AGENT,
            HEADER_CONTENT_TYPE: "text/plain",
        }
        if sitekey:
            headers[HEADER_SITEKEY] = sitekey

        response = await self._http_client.post(
            self.endpoint,
            content=solution.encode("utf-8"),
            headers=headers,
            timeout=self._timeout,
        )

        trace_id = response.headers.get(HEADER_TRACE_ID, "")
        logger.debug(f"HTTP response: status={response.status_code}, trace_id={trace_id}")

        if response.status_code >= 300:
            retry_after = None
            if response.status_code == 429:
                retry_after = parse_retry_after(response.headers.get(HEADER_RETRY_AFTER))
                if retry_after is not None:
                    logger.debug(f"Rate limited, retry after {retry_after}s")
            raise HttpError(response.status_code, retry_after, trace_id)

        result = decode_verify_response(response.content)
        return result.with_trace_id(trace_id)
