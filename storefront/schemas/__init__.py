"""
API schemas
"""

from .common import Page, PageQuery, Pagination
from .product import (
    CategoryOption,
    CategoryRef,
    ProductCreate,
    ProductIndexItem,
    ProductQuery,
    ProductResponse,
    ProductUpdate,
    PublicProductQuery,
)
from .cart import CartItem, CartItemValidation, CartValidationRequest, CartValidationResult
from .order import (
    CreateOrderRequest,
    OrderIndexItem,
    OrderItemResponse,
    OrderQuery,
    OrderResponse,
    OrderStatusUpdate,
)

__all__ = [
    "Page",
    "PageQuery",
    "Pagination",
    "CategoryOption",
    "CategoryRef",
    "ProductCreate",
    "ProductIndexItem",
    "ProductQuery",
    "ProductResponse",
    "ProductUpdate",
    "PublicProductQuery",
    "CartItem",
    "CartItemValidation",
    "CartValidationRequest",
    "CartValidationResult",
    "CreateOrderRequest",
    "OrderIndexItem",
    "OrderItemResponse",
    "OrderQuery",
    "OrderResponse",
    "OrderStatusUpdate",
]
