"""Unit tests for the Dapr event publisher"""
import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch

from storefront.events.publisher import DaprEventPublisher
from storefront.middleware.trace_context import RequestTrace

TRACE = RequestTrace(trace_id="a" * 32, span_id="b" * 16)


@pytest.fixture
def publisher():
    return DaprEventPublisher(dapr_http_port=3500, pubsub_name="storefront-pubsub")


def mock_http_client(response=None, error=None):
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    if error:
        client.post = AsyncMock(side_effect=error)
    else:
        client.post = AsyncMock(return_value=response)
    return client


def http_response(status_code):
    response = MagicMock()
    response.status_code = status_code
    response.text = ""
    return response


class TestDaprEventPublisher:

    @pytest.mark.asyncio
    async def test_publish_success(self, publisher):
        client = mock_http_client(http_response(204))

        with patch("httpx.AsyncClient", return_value=client):
            result = await publisher.publish(
                topic="order.created",
                data={"orderNumber": "ORD-1"},
                event_type="com.storefront.order.created.v1",
                trace=TRACE,
            )

        assert result is True
        url = client.post.call_args[0][0]
        assert url == "http://localhost:3500/v1.0/publish/storefront-pubsub/order.created"

        payload = client.post.call_args[1]["json"]
        assert payload["specversion"] == "1.0"
        assert payload["type"] == "com.storefront.order.created.v1"
        assert payload["data"] == {"orderNumber": "ORD-1"}
        assert payload["correlationid"] == "a" * 32

        headers = client.post.call_args[1]["headers"]
        assert headers["traceparent"].startswith(f"00-{'a' * 32}-")
        assert headers["traceparent"] != TRACE.traceparent

    @pytest.mark.asyncio
    async def test_publish_rejected(self, publisher):
        with patch("httpx.AsyncClient", return_value=mock_http_client(http_response(500))):
            assert await publisher.publish("order.created", {}, "t") is False

    @pytest.mark.asyncio
    async def test_publish_timeout(self, publisher):
        client = mock_http_client(error=httpx.ReadTimeout("timed out"))

        with patch("httpx.AsyncClient", return_value=client):
            assert await publisher.publish("order.created", {}, "t") is False

    @pytest.mark.asyncio
    async def test_sidecar_unreachable(self, publisher):
        client = mock_http_client(error=httpx.ConnectError("refused"))

        with patch("httpx.AsyncClient", return_value=client):
            assert await publisher.publish("order.created", {}, "t") is False

    @pytest.mark.asyncio
    async def test_publish_order_created(self, publisher):
        publisher.publish = AsyncMock(return_value=True)
        order = {
            "id": "65c000000000000000000001",
            "order_number": "ORD-1",
            "status": "pending",
            "total_amount": 123.0,
            "currency": "USD",
            "billing_address": {"name": "Jane Doe", "email": "jane@example.com"},
            "items": [{"product_id": "p1", "quantity": 2, "price": 50.0, "product_name": "A"}],
        }

        await publisher.publish_order_created(order)

        topic, data, event_type = publisher.publish.call_args[0]
        assert topic == "order.created"
        assert event_type == "com.storefront.order.created.v1"
        assert data["orderNumber"] == "ORD-1"
        assert data["customerEmail"] == "jane@example.com"
        assert data["items"] == [{"productId": "p1", "quantity": 2, "price": 50.0}]
        assert publisher.publish.call_args[1]["trace"] is None

    @pytest.mark.asyncio
    async def test_publish_without_trace_has_no_correlation(self, publisher):
        client = mock_http_client(http_response(200))

        with patch("httpx.AsyncClient", return_value=client):
            assert await publisher.publish("order.created", {}, "t") is True

        assert "correlationid" not in client.post.call_args[1]["json"]
        assert "traceparent" not in client.post.call_args[1]["headers"]
