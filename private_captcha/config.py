"""
Configuration for the Private Captcha client.

Values can be passed directly or read from the environment using the
``PRIVATE_CAPTCHA_`` prefix (e.g. ``PRIVATE_CAPTCHA_API_KEY``).
"""

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_FAILED_STATUS_CODE,
    DEFAULT_FORM_FIELD,
    DEFAULT_READ_TIMEOUT,
    Domains,
)


def normalize_endpoint(domain: str) -> str:
    """
    Build the verify endpoint URL from a configured domain.

    Accepts a bare host or a URL with an http(s) scheme and trailing
    slashes. The scheme is always forced to https.

    Args:
        domain: Host such as "api.privatecaptcha.com" or "https://example.com/"

    Returns:
        Endpoint URL, e.g. "https://example.com/verify"
    """
    domain = (domain or "").strip()
    if not domain:
        domain = Domains.GLOBAL

    if domain.startswith("https://"):
        domain = domain[len("https://"):]
    elif domain.startswith("http://"):
        domain = domain[len("http://"):]

    domain = domain.rstrip("/")

    return f"https://{domain}/verify"


class PrivateCaptchaSettings(BaseSettings):
    # Credentials (required by the client, validated there)
    api_key: str = ""

    # API host, bare or with scheme; self-hosted deployments override this
    domain: str = Domains.GLOBAL

    # Form field the widget stores the solution in
    form_field: str = DEFAULT_FORM_FIELD

    # Status code callers should answer with when verification fails
    failed_status_code: int = DEFAULT_FAILED_STATUS_CODE

    # Per-attempt timeouts in seconds
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT

    model_config = SettingsConfigDict(
        env_prefix="PRIVATE_CAPTCHA_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def endpoint(self) -> str:
        return normalize_endpoint(self.domain)

    @property
    def timeout(self) -> httpx.Timeout:
        """Connect timeout plus read timeout for reads, writes and the pool."""
        return httpx.Timeout(self.read_timeout, connect=self.connect_timeout)
