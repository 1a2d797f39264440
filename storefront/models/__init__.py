"""
Models module initialization
"""

from .product import Category, Product, utc_now
from .order import (
    Address,
    Order,
    OrderItem,
    OrderStatus,
    ShippingAddress,
    STATUS_TRANSITIONS,
    UNDELETABLE_STATUSES,
    can_transition,
)

__all__ = [
    "Category",
    "Product",
    "utc_now",
    "Address",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ShippingAddress",
    "STATUS_TRANSITIONS",
    "UNDELETABLE_STATUSES",
    "can_transition",
]
