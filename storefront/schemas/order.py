"""
API schemas for order endpoints
"""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from storefront.models.order import Address, ShippingAddress
from storefront.schemas.cart import CartItem
from storefront.schemas.common import PageQuery

ORDER_SORT_FIELDS = ("created_at", "order_number", "status", "total_amount", "updated_at")


class CreateOrderRequest(BaseModel):
    """Checkout payload; the shipping address defaults to the billing address"""
    items: List[CartItem] = Field(..., min_length=1, max_length=50)
    billing_address: Address
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class OrderItemProduct(BaseModel):
    id: str
    name: str
    slug: str
    sku: Optional[str] = None
    featured_image: Optional[str] = None
    current_price: float
    is_active: bool


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    product_sku: str
    quantity: int
    price: float
    total: float
    formatted_price: str
    formatted_total: str
    product: Optional[OrderItemProduct] = None


class OrderIndexItem(BaseModel):
    """Order as shown in the admin listing"""
    id: str
    order_number: str
    total_amount: float
    currency: str
    formatted_total: str
    status: str
    status_label: str
    customer_name: str
    customer_email: str
    items_count: int
    total_quantity: int
    is_shipped: bool
    is_delivered: bool
    is_cancelled: bool
    created_at: datetime
    updated_at: datetime


class OrderResponse(BaseModel):
    """Full order details"""
    id: str
    order_number: str
    status: str
    status_label: str

    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    total_amount: float
    currency: str
    formatted_total: str

    billing_address: Dict[str, Optional[str]]
    shipping_address: Dict[str, Optional[str]]
    notes: str

    is_shipped: bool
    is_delivered: bool
    is_cancelled: bool

    created_at: datetime
    updated_at: datetime
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    order_items: List[OrderItemResponse]
    items_count: int
    total_quantity: int


class OrderQuery(PageQuery):
    """Admin order listing filters"""
    search: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    min_amount: Optional[float] = Field(None, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
