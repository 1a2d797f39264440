"""
API routers
"""

from . import admin_orders, admin_products, health, public

__all__ = ["admin_orders", "admin_products", "health", "public"]
