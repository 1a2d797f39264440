"""
Dapr Event Publisher
Publishes events via Dapr Pub/Sub using the CloudEvents specification
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from storefront.core.config import config
from storefront.core.logger import logger
from storefront.middleware.trace_context import RequestTrace, current_trace

ORDER_CREATED_TOPIC = "order.created"
ORDER_CREATED_TYPE = "com.storefront.order.created.v1"


class DaprEventPublisher:
    """Publisher for sending events via Dapr Pub/Sub"""

    def __init__(self, dapr_http_port: int = None, pubsub_name: str = None, timeout: float = 5.0):
        self.dapr_url = f"http://localhost:{dapr_http_port or config.dapr_http_port}"
        self.pubsub_name = pubsub_name or config.dapr_pubsub_name
        self.timeout = timeout

    async def publish(
        self,
        topic: str,
        data: Dict[str, Any],
        event_type: str,
        trace: Optional[RequestTrace] = None,
    ) -> bool:
        """
        Publish an event to Dapr Pub/Sub as a CloudEvent.

        Publishing is best-effort: failures are logged and reported as False,
        never raised.

        Args:
            topic: The topic to publish to (e.g., 'order.created')
            data: The event payload
            event_type: The CloudEvents type (e.g., 'com.storefront.order.created.v1')
            trace: Request trace; its id becomes the event correlation id

        Returns:
            bool: True if published successfully, False otherwise
        """
        event_id = str(uuid.uuid4())
        cloud_event = {
            "specversion": "1.0",
            "type": event_type,
            "source": config.service_name,
            "id": event_id,
            "time": datetime.now(timezone.utc).isoformat(),
            "datacontenttype": "application/json",
            "data": data,
        }
        if trace:
            cloud_event["correlationid"] = trace.trace_id

        publish_url = f"{self.dapr_url}/v1.0/publish/{self.pubsub_name}/{topic}"
        headers = {"Content-Type": "application/cloudevents+json"}
        if trace:
            headers["traceparent"] = trace.child().traceparent

        metadata = {
            "eventId": event_id,
            "eventType": event_type,
            "topic": topic,
            "pubsub": self.pubsub_name,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(publish_url, json=cloud_event, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Timeout publishing event to Dapr: {event_type}", metadata=metadata)
            return False
        except httpx.HTTPError as e:
            logger.error(
                f"Cannot reach Dapr sidecar: {e}",
                metadata={**metadata, "daprUrl": self.dapr_url},
            )
            return False

        if response.status_code in (200, 204):
            logger.info(f"Published event to Dapr: {event_type}", metadata=metadata)
            return True

        logger.error(
            f"Failed to publish event to Dapr: {event_type}",
            metadata={**metadata, "statusCode": response.status_code, "response": response.text},
        )
        return False

    async def publish_order_created(self, order: Dict[str, Any]) -> bool:
        """Publish order.created with the order summary"""
        data = {
            "orderId": order["id"],
            "orderNumber": order["order_number"],
            "status": order["status"],
            "totalAmount": order["total_amount"],
            "currency": order["currency"],
            "customerName": order["billing_address"].get("name"),
            "customerEmail": order["billing_address"].get("email"),
            "items": [
                {
                    "productId": item["product_id"],
                    "quantity": item["quantity"],
                    "price": item["price"],
                }
                for item in order["items"]
            ],
        }
        return await self.publish(ORDER_CREATED_TOPIC, data, ORDER_CREATED_TYPE, trace=current_trace())


event_publisher = DaprEventPublisher()
