"""
Pytest configuration and shared fixtures for the Private Captcha client tests.
"""

import random
from typing import Callable

import httpx
import pytest
from unittest.mock import AsyncMock

from private_captcha import PrivateCaptchaClient, PrivateCaptchaSettings

TEST_DOMAIN = "captcha.example.com"


@pytest.fixture
def settings():
    return PrivateCaptchaSettings(api_key="test-api-key", domain=TEST_DOMAIN, _env_file=None)


@pytest.fixture
def mock_sleep():
    """Backoff sleep that returns immediately and records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_client(settings, mock_sleep) -> Callable[..., PrivateCaptchaClient]:
    """Factory for a client wired to a mock transport."""

    def _make(transport: httpx.AsyncBaseTransport, **overrides):
        client_settings = settings.model_copy(update=overrides) if overrides else settings
        return PrivateCaptchaClient(
            client_settings,
            http_client=httpx.AsyncClient(transport=transport),
            sleep=mock_sleep,
            rng=random.Random(1234),
        )

    return _make
