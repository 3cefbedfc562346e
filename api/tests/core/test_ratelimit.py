"""Unit tests for core.ratelimit module.

Tests the 429 handler and that rate-limited routes actually enforce limits.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from slowapi.errors import RateLimitExceeded

from core.ratelimit import limiter, rate_limit_exceeded_handler


def _make_rate_limit_exc(
    detail: str = "5 per 1 minute", retry_after: int = 30
) -> RateLimitExceeded:
    """Create a RateLimitExceeded with a mock Limit object."""
    mock_limit = MagicMock()
    mock_limit.error_message = None
    mock_limit.limit = detail
    exc = RateLimitExceeded(mock_limit)
    object.__setattr__(exc, "retry_after", retry_after)
    return exc


@pytest.mark.unit
class TestRateLimitExceededHandler:
    """Test rate_limit_exceeded_handler response."""

    def test_returns_429_with_retry_after(self):
        request = MagicMock(spec=Request)
        exc = _make_rate_limit_exc(retry_after=30)

        response = rate_limit_exceeded_handler(request, exc)

        assert response.status_code == 429
        assert response.headers.get("Retry-After") == "30"

    def test_response_body_uses_error_shape(self):
        request = MagicMock(spec=Request)
        exc = _make_rate_limit_exc(detail="10 per 1 hour", retry_after=60)

        response = rate_limit_exceeded_handler(request, exc)

        body = json.loads(response.body)
        assert "Rate limit exceeded" in body["error"]
        assert body["retry_after"] == "10 per 1 hour"


@pytest.mark.unit
class TestLimitEnforced:
    async def test_login_is_limited(self, app, settings_env):
        settings_env.setenv("CANVA_CLIENT_ID", "OC-client")
        limiter.reset()

        with patch.object(limiter, "enabled", True):
            async with AsyncClient(
                transport=ASGITransport(app=app), base_url="http://test"
            ) as client:
                statuses = [
                    (await client.get("/api/auth/login")).status_code
                    for _ in range(21)
                ]

        limiter.reset()
        assert statuses[:20] == [302] * 20
        assert statuses[20] == 429
