"""
Constants shared by the Private Captcha client.
"""

__version__ = "0.1.0"


class Domains:
    """Hosts of the Private Captcha verification API."""

    GLOBAL = "api.privatecaptcha.com"
    EU = "api.eu.privatecaptcha.com"


# Form field the widget posts the puzzle solution in
DEFAULT_FORM_FIELD = "private-captcha-solution"
DEFAULT_FAILED_STATUS_CODE = 403

# Per-attempt HTTP timeouts (seconds)
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 30.0

# Retry policy
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_MAX_BACKOFF_SECONDS = 20
MIN_BACKOFF_MILLIS = 500
RETRIABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

USER_AGENT = f"private-captcha-python/{__version__}"

# HTTP headers
HEADER_API_KEY = "X-Api-Key"
HEADER_TRACE_ID = "X-Trace-ID"
HEADER_USER_AGENT = "User-Agent"
HEADER_SITEKEY = "X-PC-Sitekey"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_RETRY_AFTER = "Retry-After"
