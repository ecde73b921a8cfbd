"""
Exceptions raised by the Private Captcha client.

Callers only ever see one of three failures from ``verify``:

- ``InvalidArgumentError``: rejected locally, no request was sent
- ``HttpError``: the API answered with a status that is not worth retrying
- ``RetriesExhaustedError``: every attempt ended in a transient failure

``ResponseDecodeError`` is raised for unreadable 2xx bodies and is retried
like a network fault, so it only reaches callers as the cause of
``RetriesExhaustedError``.
"""

from typing import Optional


class PrivateCaptchaError(Exception):
    """Base class for all Private Captcha client errors."""

    pass


class InvalidArgumentError(PrivateCaptchaError, ValueError):
    """Raised for invalid caller input before any network activity."""

    pass


class HttpError(PrivateCaptchaError):
    """Raised when the verification API responds with a status code >= 300."""

    def __init__(
        self,
        status_code: int,
        retry_after: Optional[int] = None,
        trace_id: Optional[str] = None,
    ):
        super().__init__(f"HTTP error {status_code}")
        self.status_code = status_code
        self.retry_after = retry_after
        self.trace_id = trace_id or ""


class ResponseDecodeError(PrivateCaptchaError):
    """Raised when a successful response body cannot be decoded."""

    pass


class RetriesExhaustedError(PrivateCaptchaError):
    """Raised when verification failed on every attempt."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Captcha verification failed after {attempts} attempts")
        self.attempts = attempts
        self.last_error = last_error
        self.__cause__ = last_error
