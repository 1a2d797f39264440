"""
Dependencies module initialization
"""

from .repositories import (
    get_cache,
    get_event_publisher,
    get_category_repository,
    get_product_repository,
    get_order_repository,
)

__all__ = [
    "get_cache",
    "get_event_publisher",
    "get_category_repository",
    "get_product_repository",
    "get_order_repository",
]
