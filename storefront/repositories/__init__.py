"""
Repositories module initialization
"""

from .base import BaseRepositoryInterface, OrderRepositoryInterface, ProductRepositoryInterface
from .category import CategoryRepository
from .product import ProductRepository
from .order import OrderRepository

__all__ = [
    "BaseRepositoryInterface",
    "OrderRepositoryInterface",
    "ProductRepositoryInterface",
    "CategoryRepository",
    "ProductRepository",
    "OrderRepository",
]
