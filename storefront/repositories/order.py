"""
Order repository: checkout with stock reservation and admin order management
"""

import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from storefront.core.cache import CacheHelper
from storefront.core.config import config
from storefront.core.errors import ErrorResponse, NotFoundError
from storefront.core.logger import logger
from storefront.events.publisher import DaprEventPublisher
from storefront.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    UNDELETABLE_STATUSES,
    can_transition,
)
from storefront.models.product import Product
from storefront.repositories.base import OrderRepositoryInterface
from storefront.repositories.product import CACHE_PREFIX, product_from_document, to_object_id
from storefront.schemas.common import Page, Pagination
from storefront.schemas.order import (
    ORDER_SORT_FIELDS,
    CreateOrderRequest,
    OrderIndexItem,
    OrderItemProduct,
    OrderItemResponse,
    OrderQuery,
    OrderResponse,
    OrderStatusUpdate,
)
from storefront.utils.text import contains_pattern


class StockReservationError(Exception):
    """A cart line cannot be reserved"""


def generate_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:13].upper()}"


def order_from_document(doc: dict) -> Order:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return Order(**doc)


def to_index_item(order: Order) -> OrderIndexItem:
    return OrderIndexItem(
        id=order.id,
        order_number=order.order_number,
        total_amount=order.total_amount,
        currency=order.currency,
        formatted_total=order.formatted_total,
        status=order.status.value,
        status_label=order.status.value.capitalize(),
        customer_name=order.billing_address.get("name") or "N/A",
        customer_email=order.billing_address.get("email") or "N/A",
        items_count=order.items_count,
        total_quantity=order.total_quantity,
        is_shipped=order.is_shipped,
        is_delivered=order.is_delivered,
        is_cancelled=order.is_cancelled,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def to_response(order: Order, products: Dict[str, Product] = None) -> OrderResponse:
    products = products or {}
    order_items = []
    for item in order.items:
        product = products.get(item.product_id)
        order_items.append(OrderItemResponse(
            product_id=item.product_id,
            product_name=item.product_name,
            product_sku=item.product_sku,
            quantity=item.quantity,
            price=item.price,
            total=item.total,
            formatted_price=f"{item.price:,.2f}",
            formatted_total=f"{item.total:,.2f}",
            product=OrderItemProduct(
                id=product.id,
                name=product.name,
                slug=product.slug,
                sku=product.sku,
                featured_image=product.image,
                current_price=product.current_price,
                is_active=product.is_active,
            ) if product else None,
        ))

    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        status_label=order.status.value.capitalize(),
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        shipping_amount=order.shipping_amount,
        discount_amount=order.discount_amount,
        total_amount=order.total_amount,
        currency=order.currency,
        formatted_total=order.formatted_total,
        billing_address=order.billing_address,
        shipping_address=order.shipping_address,
        notes=order.notes,
        is_shipped=order.is_shipped,
        is_delivered=order.is_delivered,
        is_cancelled=order.is_cancelled,
        created_at=order.created_at,
        updated_at=order.updated_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        order_items=order_items,
        items_count=order.items_count,
        total_quantity=order.total_quantity,
    )


def calculate_totals(subtotal: float) -> Dict[str, float]:
    """Shipping, tax and grand total for an order subtotal"""
    shipping_amount = round(config.order_shipping_amount, 2)
    tax_amount = round(subtotal * config.order_tax_rate, 2)
    return {
        "subtotal": round(subtotal, 2),
        "tax_amount": tax_amount,
        "shipping_amount": shipping_amount,
        "discount_amount": 0.0,
        "total_amount": round(subtotal + shipping_amount + tax_amount, 2),
    }


class OrderRepository(OrderRepositoryInterface):
    """MongoDB implementation of the order contract"""

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        products: AsyncIOMotorCollection,
        publisher: DaprEventPublisher,
        cache: Optional[CacheHelper] = None,
    ):
        self.collection = collection
        self.products = products
        self.publisher = publisher
        self.cache = cache

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_products(self, orders: List[Order]) -> Dict[str, Product]:
        object_ids = {
            oid for order in orders for oid in (to_object_id(i.product_id) for i in order.items) if oid
        }
        if not object_ids:
            return {}
        docs = await self.products.find({"_id": {"$in": list(object_ids)}}).to_list(length=None)
        return {str(doc["_id"]): product_from_document(doc) for doc in docs}

    async def _get_document(self, order_number: str) -> dict:
        doc = await self.collection.find_one({"order_number": order_number})
        if not doc:
            raise NotFoundError()
        return doc

    async def _reserve(self, product_id: ObjectId, quantity: int) -> Optional[dict]:
        """Atomically take `quantity` units; None when not enough stock is left"""
        updated = await self.products.find_one_and_update(
            {
                "_id": product_id,
                "is_active": True,
                "in_stock": True,
                "stock_quantity": {"$gte": quantity},
            },
            {
                "$inc": {"stock_quantity": -quantity},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None and updated.get("stock_quantity", 0) <= 0:
            # No-op if a concurrent release has already restocked it
            await self.products.update_one(
                {"_id": product_id, "stock_quantity": {"$lte": 0}}, {"$set": {"in_stock": False}}
            )
            updated["in_stock"] = False
        return updated

    async def _release(self, reserved: List[Tuple[ObjectId, int]]):
        """Give back stock taken by a failed checkout"""
        for product_id, quantity in reserved:
            try:
                await self.products.update_one(
                    {"_id": product_id},
                    {"$inc": {"stock_quantity": quantity}, "$set": {"in_stock": True}},
                )
            except PyMongoError as e:
                logger.error(
                    f"Failed to release reserved stock for product {product_id}",
                    error=e,
                    metadata={"event": "stock_release_failed", "product_id": str(product_id), "quantity": quantity},
                )

    async def _invalidate_products(self, slugs: List[str]):
        """Drop cached product pages whose stock changed"""
        if self.cache is None:
            return
        for slug in filter(None, slugs):
            await self.cache.clear_item(CACHE_PREFIX, slug)
        await self.cache.clear_listing(CACHE_PREFIX)

    def _build_filters(self, query: OrderQuery) -> Dict[str, Any]:
        filters: Dict[str, Any] = {}

        if query.search and query.search.strip():
            pattern = contains_pattern(query.search)
            filters["$or"] = [
                {"order_number": pattern},
                {"billing_address.name": pattern},
                {"billing_address.email": pattern},
                {"notes": pattern},
            ]

        if query.status and query.status != "all":
            filters["status"] = query.status

        created_at = {}
        if query.date_from:
            created_at["$gte"] = datetime.combine(query.date_from, time.min, tzinfo=timezone.utc)
        if query.date_to:
            created_at["$lt"] = datetime.combine(query.date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
        if created_at:
            filters["created_at"] = created_at

        amount = {}
        if query.min_amount is not None:
            amount["$gte"] = query.min_amount
        if query.max_amount is not None:
            amount["$lte"] = query.max_amount
        if amount:
            filters["total_amount"] = amount

        return filters

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def create_order(self, request: CreateOrderRequest) -> OrderResponse:
        """
        Create a pending order from a validated checkout request.

        Stock for every line is reserved with a conditional decrement; when any
        line cannot be reserved, stock already taken is released and the
        request fails with 422.
        """
        billing_address = request.billing_address.model_dump()
        shipping_address = (
            request.shipping_address.model_dump() if request.shipping_address else billing_address
        )
        reserved: List[Tuple[ObjectId, int]] = []
        reserved_slugs: List[str] = []

        try:
            object_ids = [oid for oid in (to_object_id(item.id) for item in request.items) if oid]
            docs = await self.products.find(
                {"_id": {"$in": object_ids}, "is_active": True, "in_stock": True}
            ).to_list(length=None)
            available = {doc["_id"]: doc for doc in docs}

            order_items = []
            subtotal = 0.0
            for item in request.items:
                product_id = to_object_id(item.id)
                if product_id not in available:
                    raise StockReservationError(f"Product with ID {item.id} is not available")

                updated = await self._reserve(product_id, item.quantity)
                if updated is None:
                    current = await self.products.find_one({"_id": product_id}) or available[product_id]
                    raise StockReservationError(
                        f"Insufficient stock for {current['name']}. "
                        f"Available: {current.get('stock_quantity', 0)}, Requested: {item.quantity}"
                    )
                reserved.append((product_id, item.quantity))
                reserved_slugs.append(updated.get("slug"))

                product = product_from_document(updated)
                price = product.current_price
                total = round(price * item.quantity, 2)
                order_items.append(OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_sku=product.sku or "",
                    price=price,
                    quantity=item.quantity,
                    total=total,
                ))
                subtotal += total

            now = datetime.now(timezone.utc)
            doc = {
                "order_number": generate_order_number(),
                "status": OrderStatus.PENDING.value,
                **calculate_totals(subtotal),
                "currency": config.order_currency,
                "billing_address": billing_address,
                "shipping_address": shipping_address,
                "notes": request.notes or "",
                "items": [order_item.model_dump() for order_item in order_items],
                "created_at": now,
                "updated_at": now,
                "shipped_at": None,
                "delivered_at": None,
            }
            result = await self.collection.insert_one(doc)
            doc["_id"] = result.inserted_id

        except StockReservationError as e:
            await self._release(reserved)
            logger.warning(str(e), metadata={"event": "create_order_rejected"})
            raise ErrorResponse(str(e), status_code=422)
        except PyMongoError as e:
            await self._release(reserved)
            logger.error(f"MongoDB error creating order: {e}", error=e)
            raise ErrorResponse("Error creating order. Please try again.", status_code=500)
        except Exception as e:
            await self._release(reserved)
            logger.error(f"Unexpected error creating order: {e}", error=e, metadata={"event": "create_order_failed"})
            raise ErrorResponse("Error creating order. Please try again.", status_code=500)

        order = order_from_document(doc)
        await self._invalidate_products(reserved_slugs)

        logger.info(
            f"Created order {order.order_number}",
            metadata={
                "event": "create_order",
                "order_number": order.order_number,
                "items": order.items_count,
                "total_amount": order.total_amount,
            }
        )

        await self.publisher.publish_order_created(order.model_dump(mode="json"))

        products = await self._load_products([order])
        return to_response(order, products)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def index(self, query: OrderQuery) -> Page[OrderIndexItem]:
        """Admin order listing with search, status, date and amount filters"""
        sort_by = query.sort_by if query.sort_by in ORDER_SORT_FIELDS else "created_at"
        direction = 1 if query.sort_order == "asc" else -1

        try:
            filters = self._build_filters(query)
            total = await self.collection.count_documents(filters)
            cursor = (
                self.collection.find(filters)
                .sort([(sort_by, direction)])
                .skip(query.skip)
                .limit(query.per_page)
            )
            docs = await cursor.to_list(length=query.per_page)
        except PyMongoError as e:
            logger.error(f"MongoDB error listing orders: {e}", error=e)
            raise ErrorResponse("Error retrieving orders", status_code=500)

        return Page[OrderIndexItem](
            items=[to_index_item(order_from_document(doc)) for doc in docs],
            pagination=Pagination.build(query.page, query.per_page, total),
        )

    async def store(self, data: CreateOrderRequest) -> OrderResponse:
        """Orders are only ever created through checkout"""
        return await self.create_order(data)

    async def show(self, key: str) -> OrderResponse:
        try:
            order = order_from_document(await self._get_document(key))
            products = await self._load_products([order])
        except PyMongoError as e:
            logger.error(f"MongoDB error getting order: {e}", error=e)
            raise ErrorResponse("Error retrieving Order details", status_code=500)

        return to_response(order, products)

    async def update(self, key: str, data: OrderStatusUpdate) -> OrderResponse:
        """Move an order to a new status following the status lifecycle"""
        if not data.status:
            raise ErrorResponse("Only status updates are allowed", status_code=422)

        try:
            new_status = OrderStatus(data.status)
        except ValueError:
            raise ErrorResponse("Invalid status provided", status_code=422)

        try:
            current = order_from_document(await self._get_document(key))

            if not can_transition(current.status, new_status):
                raise ErrorResponse(
                    f"Cannot change status from '{current.status.value}' to '{new_status.value}'. "
                    "Invalid status transition.",
                    status_code=422,
                )

            now = datetime.now(timezone.utc)
            changes: Dict[str, Any] = {"status": new_status.value, "updated_at": now}
            if new_status == OrderStatus.SHIPPED:
                changes["shipped_at"] = now
            elif new_status == OrderStatus.DELIVERED:
                changes["delivered_at"] = now
                if current.shipped_at is None:
                    changes["shipped_at"] = now

            # Matching on the current status guards against concurrent transitions
            updated = await self.collection.find_one_and_update(
                {"order_number": key, "status": current.status.value},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"MongoDB error updating order: {e}", error=e)
            raise ErrorResponse("Error updating order status", status_code=500)

        if updated is None:
            raise ErrorResponse("Order was modified concurrently. Please retry.", status_code=409)

        logger.info(
            f"Order {key} moved to {new_status.value}",
            metadata={"event": "update_order_status", "order_number": key,
                      "from": current.status.value, "to": new_status.value}
        )

        order = order_from_document(updated)
        return to_response(order, await self._load_products([order]))

    async def destroy(self, key: str) -> OrderResponse:
        """Delete an order with its items; shipped and delivered orders are kept"""
        try:
            order = order_from_document(await self._get_document(key))

            if order.status in UNDELETABLE_STATUSES:
                raise ErrorResponse(
                    "Cannot delete orders that have been shipped or delivered. "
                    "Please cancel the order first.",
                    status_code=422,
                )

            result = await self.collection.delete_one({"order_number": key, "status": order.status.value})
        except PyMongoError as e:
            logger.error(f"MongoDB error deleting order: {e}", error=e)
            raise ErrorResponse("Error deleting order", status_code=500)

        if result.deleted_count == 0:
            raise ErrorResponse("Order was modified concurrently. Please retry.", status_code=409)

        logger.info(
            f"Deleted order {key}",
            metadata={"event": "delete_order", "order_number": key, "items": order.items_count}
        )
        return to_response(order)
