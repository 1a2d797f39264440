"""
Order document models and the order status lifecycle
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, EmailStr, Field

from storefront.models.product import utc_now


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Allowed next states for each status
STATUS_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Orders in these states can no longer be deleted
UNDELETABLE_STATUSES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Check whether an order may move from `current` to `new`"""
    return new in STATUS_TRANSITIONS.get(current, set())


class Address(BaseModel):
    """Billing address; every field is required"""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    phone: str = Field(..., min_length=10, max_length=20)
    address: str = Field(..., min_length=5, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip: str = Field(..., min_length=3, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)


class ShippingAddress(Address):
    """Shipping address; contact fields are optional"""
    email: Optional[EmailStr] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=20)


class OrderItem(BaseModel):
    """Order line, snapshotting product name, SKU and price at purchase time"""
    product_id: str
    product_name: str
    product_sku: str = ""
    price: float
    quantity: int = Field(..., ge=1)
    total: float


class Order(BaseModel):
    """Order document as stored in MongoDB"""
    id: Optional[str] = None
    order_number: str
    status: OrderStatus = OrderStatus.PENDING

    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float = 0.0
    total_amount: float
    currency: str = "USD"

    billing_address: Dict[str, Optional[str]]
    shipping_address: Dict[str, Optional[str]]
    notes: str = ""
    items: List[OrderItem] = []

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @property
    def formatted_total(self) -> str:
        return f"{self.currency} {self.total_amount:,.2f}"

    @property
    def is_shipped(self) -> bool:
        return self.status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED)

    @property
    def is_delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    @property
    def items_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)
