"""
Decoder for the JSON body of a successful /verify response.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ResponseDecodeError
from .models import VerificationResult, VerifyCode

logger = logging.getLogger(__name__)


class VerifyResponseBody(BaseModel):
    """Wire schema of the /verify response. Unknown fields are ignored."""

    success: bool = False
    code: VerifyCode = VerifyCode.NO_ERROR
    origin: str = ""
    timestamp: str = ""

    model_config = ConfigDict(extra="ignore", strict=True)

    @field_validator("code", mode="before")
    @classmethod
    def map_code(cls, value: Any) -> Any:
        if value is None:
            return VerifyCode.NO_ERROR
        # bool is an int subclass but never a valid code
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"code must be an integer, got {type(value).__name__}")
        return VerifyCode.from_code(value)

    @field_validator("success", mode="before")
    @classmethod
    def check_success(cls, value: Any) -> Any:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValueError(f"success must be a boolean, got {type(value).__name__}")
        return value

    @field_validator("origin", "timestamp", mode="before")
    @classmethod
    def null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


def decode_verify_response(body: Union[str, bytes]) -> VerificationResult:
    """
    Decode a /verify response body into a VerificationResult.

    The returned result has an empty trace id and zero attempts; the client
    fills both in after the exchange.

    Args:
        body: UTF-8 JSON text of the response

    Returns:
        VerificationResult with success, code, origin and timestamp set

    Raises:
        ResponseDecodeError: If the body is not a JSON object of the expected shape
    """
    try:
        parsed = VerifyResponseBody.model_validate_json(body)
    except ValidationError as e:
        logger.debug(f"Failed to decode verify response: {e.error_count()} error(s)")
        raise ResponseDecodeError(f"Invalid verify response: {_first_error(e)}") from e

    return VerificationResult(
        success=parsed.success,
        code=parsed.code,
        origin=parsed.origin,
        timestamp=parsed.timestamp,
    )


def _first_error(error: ValidationError) -> Optional[str]:
    errors = error.errors()
    if not errors:
        return None
    return errors[0].get("msg")
