"""
Catalogue document models: products and their categories
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class Category(BaseModel):
    """Catalogue category; top-level categories have no parent"""
    id: Optional[str] = None
    name: str
    slug: str
    parent_id: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class Product(BaseModel):
    """Product document as stored in MongoDB"""

    id: Optional[str] = None
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: Optional[str] = None

    # Pricing
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)

    # Stock
    stock_quantity: int = Field(default=0, ge=0)
    in_stock: bool = True
    is_active: bool = True

    image: Optional[str] = None
    category_id: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def current_price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_on_sale(self) -> bool:
        return self.sale_price is not None and self.sale_price < self.price

    @property
    def discount_percentage(self) -> int:
        if not self.is_on_sale or not self.price:
            return 0
        return round((self.price - self.sale_price) / self.price * 100)

    @property
    def is_available(self) -> bool:
        """Whether the product can be sold at all, regardless of quantity"""
        return self.is_active and self.in_stock
