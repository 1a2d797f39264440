"""
Public storefront API endpoints (no authentication required)
"""

from fastapi import APIRouter, Depends, Query, Request

from storefront.core.config import config
from storefront.core.rate_limit import limiter
from storefront.core.responses import ApiErrorModel, ApiResponse
from storefront.dependencies import get_order_repository, get_product_repository
from storefront.repositories.order import OrderRepository
from storefront.repositories.product import ProductRepository
from storefront.schemas.cart import CartValidationRequest
from storefront.schemas.order import CreateOrderRequest
from storefront.schemas.product import PublicProductQuery

router = APIRouter()


@router.get("/products")
@limiter.limit(config.public_rate_limit)
async def get_public_products(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(config.public_products_per_page, ge=1, le=100, description="Products per page"),
    category_id: str = Query(None, description="Filter by category id"),
    search: str = Query(None, description="Search in name, description and SKU"),
    min_price: float = Query(None, ge=0, description="Minimum price"),
    max_price: float = Query(None, ge=0, description="Maximum price"),
    sort_by: str = Query("name", description="price, price_desc, created_at or name"),
    repository: ProductRepository = Depends(get_product_repository),
):
    """
    List active, in-stock products for the storefront.
    Returns a page of products with camelCase pagination metadata.
    """
    query = PublicProductQuery(
        page=page,
        per_page=per_page,
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
    )
    return ApiResponse.success(await repository.get_public_products(query))


@router.get("/products/{slug}", responses={404: {"model": ApiErrorModel}})
@limiter.limit(config.public_rate_limit)
async def get_public_product(
    request: Request,
    slug: str,
    repository: ProductRepository = Depends(get_product_repository),
):
    """Get an active product by slug"""
    return ApiResponse.success(await repository.get_public_product_by_slug(slug))


@router.get("/categories")
@limiter.limit(config.public_rate_limit)
async def get_categories(
    request: Request,
    repository: ProductRepository = Depends(get_product_repository),
):
    """Categories as select options, each parent followed by its children"""
    return ApiResponse.success(await repository.get_categories_for_select())


@router.post("/cart/validate-stock")
@limiter.limit(config.cart_rate_limit)
async def validate_cart_stock(
    request: Request,
    payload: CartValidationRequest,
    repository: ProductRepository = Depends(get_product_repository),
):
    """Check each cart line against current stock"""
    result = await repository.validate_cart_stock(payload)
    return ApiResponse.success(result, message=result.message)


@router.post("/orders", responses={422: {"model": ApiErrorModel}})
@limiter.limit(config.order_rate_limit)
async def create_order(
    request: Request,
    payload: CreateOrderRequest,
    repository: OrderRepository = Depends(get_order_repository),
):
    """
    Place an order from the cart.
    Stock is reserved for every line; the order starts as pending.
    """
    order = await repository.create_order(payload)
    return ApiResponse.success(order, message="Order created successfully")
