"""Tests for forwarding paid orders to the fulfillment webhook."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from services.fulfillment_service import forward_order
from services.payments_service import build_fulfillment_payload
from tests.factories import json_response, make_payment_intent

pytestmark = pytest.mark.unit

N8N_URL = "https://n8n.example.com/webhook/certificates"


@pytest.fixture
def payload():
    return build_fulfillment_payload(make_payment_intent())


@pytest.fixture
def n8n_configured(settings_env):
    settings_env.setenv("N8N_WEBHOOK_URL", N8N_URL)
    return settings_env


def _mock_client(response=None, side_effect=None) -> MagicMock:
    client = MagicMock(spec=httpx.AsyncClient)
    client.post = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestForwardOrder:
    """Tests for forward_order."""

    async def test_posts_camel_case_json(self, n8n_configured, payload):
        client = _mock_client(json_response(200, {"ok": True}, method="POST"))
        with patch(
            "services.fulfillment_service.get_http_client",
            new_callable=AsyncMock,
            return_value=client,
        ):
            assert await forward_order(payload) is True

        url = client.post.call_args.args[0]
        body = client.post.call_args.kwargs["json"]
        assert url == N8N_URL
        assert body["paymentIntentId"] == "pi_test_123"
        assert body["buyerEmail"] == "buyer@example.com"
        assert body["amountPaid"] == 9.99

    async def test_non_2xx_is_logged_not_raised(self, n8n_configured, payload):
        client = _mock_client(json_response(502, {"error": "down"}, method="POST"))
        with patch(
            "services.fulfillment_service.get_http_client",
            new_callable=AsyncMock,
            return_value=client,
        ):
            assert await forward_order(payload) is False

    async def test_network_error_is_logged_not_raised(self, n8n_configured, payload):
        client = _mock_client(side_effect=httpx.ConnectError("refused"))
        with patch(
            "services.fulfillment_service.get_http_client",
            new_callable=AsyncMock,
            return_value=client,
        ):
            assert await forward_order(payload) is False

    async def test_missing_url_skips_request(self, settings_env, payload):
        settings_env.setenv("N8N_WEBHOOK_URL", "")
        with patch(
            "services.fulfillment_service.get_http_client", new_callable=AsyncMock
        ) as mock_get_client:
            assert await forward_order(payload) is False

        mock_get_client.assert_not_called()
