"""
Repository contracts.

Every repository exposes the CRUD operations of `BaseRepositoryInterface`;
the product and order contracts add the storefront operations on top.
Concrete implementations live next to their contract.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, TypeVar

from storefront.schemas.cart import CartValidationRequest, CartValidationResult
from storefront.schemas.common import Page
from storefront.schemas.order import CreateOrderRequest, OrderResponse
from storefront.schemas.product import (
    CategoryOption,
    ProductIndexItem,
    ProductResponse,
    PublicProductQuery,
)

QueryT = TypeVar("QueryT")
CreateT = TypeVar("CreateT")
UpdateT = TypeVar("UpdateT")
ItemT = TypeVar("ItemT")
ResponseT = TypeVar("ResponseT")


class BaseRepositoryInterface(ABC, Generic[QueryT, CreateT, UpdateT, ItemT, ResponseT]):
    """Generic CRUD contract addressed by a route key (slug, order number)"""

    @abstractmethod
    async def index(self, query: QueryT) -> Page[ItemT]:
        """Get a filtered, paginated list of resources"""

    @abstractmethod
    async def store(self, data: CreateT) -> ResponseT:
        """Create a new resource"""

    @abstractmethod
    async def show(self, key: str) -> ResponseT:
        """Get a resource by its route key; raises NotFoundError when missing"""

    @abstractmethod
    async def update(self, key: str, data: UpdateT) -> ResponseT:
        """Update a resource and return its new state"""

    @abstractmethod
    async def destroy(self, key: str) -> ResponseT:
        """Delete a resource and return its last state"""


class ProductRepositoryInterface(BaseRepositoryInterface):
    """Product contract with the public storefront reads and cart validation"""

    @abstractmethod
    async def get_categories_for_select(self) -> List[CategoryOption]:
        """Get categories grouped by parent and sorted for select options"""

    @abstractmethod
    async def get_public_products(self, query: PublicProductQuery) -> Page[ProductIndexItem]:
        """Get the publicly visible, purchasable products"""

    @abstractmethod
    async def get_public_product_by_slug(self, slug: str) -> ProductResponse:
        """Get an active product by slug; raises NotFoundError when missing"""

    @abstractmethod
    async def validate_cart_stock(self, request: CartValidationRequest) -> CartValidationResult:
        """Check each cart line against current stock"""


class OrderRepositoryInterface(BaseRepositoryInterface):
    """Order contract with storefront checkout"""

    @abstractmethod
    async def create_order(self, request: CreateOrderRequest) -> OrderResponse:
        """Reserve stock and create a pending order"""
