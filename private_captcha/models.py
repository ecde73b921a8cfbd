"""
Pydantic models for captcha verification requests and results.

Both models are frozen: the client never mutates a request or a result, it
derives updated copies instead (``with_attempts``, ``with_trace_id``).
"""

import enum

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_MAX_BACKOFF_SECONDS


class VerifyCode(enum.IntEnum):
    """Outcome code reported by the verification API.

    Unknown wire values map to ``ERROR_OTHER`` instead of raising, so
    ``VerifyCode(999)`` is ``VerifyCode.ERROR_OTHER``.
    """

    NO_ERROR = 0
    ERROR_OTHER = 1
    DUPLICATE_SOLUTIONS = 2
    INVALID_SOLUTION = 3
    PARSE_RESPONSE = 4
    PUZZLE_EXPIRED = 5
    INVALID_PROPERTY = 6
    WRONG_OWNER = 7
    VERIFIED_BEFORE = 8
    MAINTENANCE_MODE = 9
    TEST_PROPERTY = 10
    INTEGRITY = 11
    ORG_SCOPE = 12

    @classmethod
    def _missing_(cls, value):
        return cls.ERROR_OTHER

    @classmethod
    def from_code(cls, code: int) -> "VerifyCode":
        """Map an integer wire value to a code, defaulting to ERROR_OTHER."""
        return cls(code)

    @property
    def error_string(self) -> str:
        return _ERROR_STRINGS[self]


_ERROR_STRINGS = {
    VerifyCode.NO_ERROR: "",
    VerifyCode.ERROR_OTHER: "error-other",
    VerifyCode.DUPLICATE_SOLUTIONS: "solution-duplicates",
    VerifyCode.INVALID_SOLUTION: "solution-invalid",
    VerifyCode.PARSE_RESPONSE: "solution-bad-format",
    VerifyCode.PUZZLE_EXPIRED: "puzzle-expired",
    VerifyCode.INVALID_PROPERTY: "property-invalid",
    VerifyCode.WRONG_OWNER: "property-owner-mismatch",
    VerifyCode.VERIFIED_BEFORE: "solution-verified-before",
    VerifyCode.MAINTENANCE_MODE: "maintenance-mode",
    VerifyCode.TEST_PROPERTY: "property-test",
    VerifyCode.INTEGRITY: "integrity-error",
    VerifyCode.ORG_SCOPE: "org-scope-error",
}


class VerificationRequest(BaseModel):
    """
    Input for a single verification call.

    The solution is validated by the client, not here, so that an empty
    solution fails with ``InvalidArgumentError`` at ``verify`` time.
    Non-positive retry limits fall back to the defaults inside the client.
    """

    solution: str = ""
    sitekey: str = ""
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    max_backoff_seconds: int = DEFAULT_MAX_BACKOFF_SECONDS

    model_config = ConfigDict(frozen=True)

    def with_sitekey(self, sitekey: str) -> "VerificationRequest":
        return self.model_copy(update={"sitekey": sitekey})

    def with_max_attempts(self, max_attempts: int) -> "VerificationRequest":
        return self.model_copy(update={"max_attempts": max_attempts})

    def with_max_backoff_seconds(self, max_backoff_seconds: int) -> "VerificationRequest":
        return self.model_copy(update={"max_backoff_seconds": max_backoff_seconds})


class VerificationResult(BaseModel):
    """
    Outcome of a verification call.

    ``success`` means the API processed the request without a protocol
    error; ``ok()`` additionally requires ``code == NO_ERROR``. A test
    property, for example, yields ``success=True`` but ``ok() is False``.
    """

    success: bool = False
    code: VerifyCode = VerifyCode.NO_ERROR
    origin: str = ""
    timestamp: str = ""
    trace_id: str = Field(default="", description="X-Trace-ID of the HTTP exchange")
    attempts: int = Field(default=0, description="Transport attempts used")

    model_config = ConfigDict(frozen=True)

    def ok(self) -> bool:
        """True only if the API reported success with no error code."""
        return self.success and self.code == VerifyCode.NO_ERROR

    @property
    def error_message(self) -> str:
        return self.code.error_string

    def with_attempts(self, attempts: int) -> "VerificationResult":
        return self.model_copy(update={"attempts": attempts})

    def with_trace_id(self, trace_id: str) -> "VerificationResult":
        return self.model_copy(update={"trace_id": trace_id})
