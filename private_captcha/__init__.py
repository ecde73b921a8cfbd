"""
Python client for verifying Private Captcha solutions.
"""

from .client import PrivateCaptchaClient
from .config import PrivateCaptchaSettings, normalize_endpoint
from .constants import Domains, __version__
from .errors import (
    HttpError,
    InvalidArgumentError,
    PrivateCaptchaError,
    ResponseDecodeError,
    RetriesExhaustedError,
)
from .models import VerificationRequest, VerificationResult, VerifyCode

__all__ = [
    "Domains",
    "HttpError",
    "InvalidArgumentError",
    "PrivateCaptchaClient",
    "PrivateCaptchaError",
    "PrivateCaptchaSettings",
    "ResponseDecodeError",
    "RetriesExhaustedError",
    "VerificationRequest",
    "VerificationResult",
    "VerifyCode",
    "__version__",
    "normalize_endpoint",
]
