"""
Dependency injection for repositories and their collaborators
"""

from fastapi import Depends

from storefront.core.cache import CacheHelper, cache
from storefront.db.mongodb import get_category_collection, get_order_collection, get_product_collection
from storefront.events.publisher import DaprEventPublisher, event_publisher
from storefront.repositories.category import CategoryRepository
from storefront.repositories.order import OrderRepository
from storefront.repositories.product import ProductRepository


def get_cache() -> CacheHelper:
    """Get the shared Redis cache helper"""
    return cache


def get_event_publisher() -> DaprEventPublisher:
    """Get the shared Dapr event publisher"""
    return event_publisher


async def get_category_repository() -> CategoryRepository:
    """Get category repository instance"""
    collection = await get_category_collection()
    return CategoryRepository(collection)


async def get_product_repository(
    categories: CategoryRepository = Depends(get_category_repository),
    cache_helper: CacheHelper = Depends(get_cache),
) -> ProductRepository:
    """Get product repository instance"""
    collection = await get_product_collection()
    return ProductRepository(collection, categories, cache_helper)


async def get_order_repository(
    publisher: DaprEventPublisher = Depends(get_event_publisher),
    cache_helper: CacheHelper = Depends(get_cache),
) -> OrderRepository:
    """Get order repository instance"""
    orders = await get_order_collection()
    products = await get_product_collection()
    return OrderRepository(orders, products, publisher, cache_helper)
