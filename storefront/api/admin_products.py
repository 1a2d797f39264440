"""
Admin product management endpoints
"""

from fastapi import APIRouter, Depends, Query

from storefront.core.config import config
from storefront.core.responses import ApiErrorModel, ApiResponse
from storefront.dependencies import get_product_repository
from storefront.repositories.product import ProductRepository
from storefront.schemas.product import ProductCreate, ProductQuery, ProductUpdate

router = APIRouter()


@router.get("")
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(config.admin_per_page, ge=1, le=100, description="Products per page"),
    category_id: str = Query(None, description="Filter by category id"),
    search: str = Query(None, description="Search in name, description and SKU"),
    min_price: float = Query(None, ge=0, description="Minimum price"),
    max_price: float = Query(None, ge=0, description="Maximum price"),
    status: str = Query(None, pattern="^(active|inactive)$", description="active or inactive"),
    repository: ProductRepository = Depends(get_product_repository),
):
    """List all products, newest first"""
    query = ProductQuery(
        page=page,
        per_page=per_page,
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        status=status,
    )
    return ApiResponse.success(await repository.index(query))


@router.post("", responses={422: {"model": ApiErrorModel}})
async def create_product(
    product: ProductCreate,
    repository: ProductRepository = Depends(get_product_repository),
):
    """Create a product; the slug is generated from the name"""
    created = await repository.store(product)
    return ApiResponse.success(created, message="Product created successfully")


@router.get("/categories")
async def get_categories(repository: ProductRepository = Depends(get_product_repository)):
    return ApiResponse.success(await repository.get_categories_for_select())


@router.get("/{slug}", responses={404: {"model": ApiErrorModel}})
async def get_product(slug: str, repository: ProductRepository = Depends(get_product_repository)):
    return ApiResponse.success(await repository.show(slug))


@router.patch("/{slug}", responses={404: {"model": ApiErrorModel}, 422: {"model": ApiErrorModel}})
async def update_product(
    slug: str,
    product: ProductUpdate,
    repository: ProductRepository = Depends(get_product_repository),
):
    """Update the provided fields of a product"""
    updated = await repository.update(slug, product)
    return ApiResponse.success(updated, message="Product updated successfully")


@router.delete("/{slug}", responses={404: {"model": ApiErrorModel}})
async def delete_product(slug: str, repository: ProductRepository = Depends(get_product_repository)):
    await repository.destroy(slug)
    return ApiResponse.success(message="Product deleted successfully")
