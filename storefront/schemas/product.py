"""
API schemas for product and category endpoints
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from storefront.schemas.common import PageQuery


class ProductCreate(BaseModel):
    """Schema for creating a new product; the slug is derived from the name"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    stock_quantity: int = Field(0, ge=0)
    in_stock: bool = True
    is_active: bool = True
    image: Optional[str] = Field(None, max_length=2048)
    category_id: str


class ProductUpdate(BaseModel):
    """Schema for updating an existing product; only provided fields change"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    in_stock: Optional[bool] = None
    is_active: Optional[bool] = None
    image: Optional[str] = Field(None, max_length=2048)
    category_id: Optional[str] = None


class CategoryRef(BaseModel):
    id: str
    name: str


class ProductIndexItem(BaseModel):
    """Product as shown in listings"""
    id: str
    slug: str
    name: str
    sku: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    current_price: float
    is_on_sale: bool
    discount_percentage: int
    stock_quantity: int
    in_stock: bool
    is_active: bool
    featured_image: Optional[str] = None
    category: Optional[str] = None
    short_description: Optional[str] = None


class ProductResponse(BaseModel):
    """Full product details"""
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    current_price: float
    is_on_sale: bool
    discount_percentage: int
    stock_quantity: int
    in_stock: bool
    is_active: bool
    featured_image: Optional[str] = None
    category: Optional[CategoryRef] = None


class ProductQuery(PageQuery):
    """Admin listing filters"""
    category_id: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    status: Optional[Literal["active", "inactive"]] = None


class PublicProductQuery(PageQuery):
    """Storefront listing filters and sort order"""
    per_page: int = Field(12, ge=1, le=100)
    category_id: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    sort_by: str = "name"


class CategoryOption(BaseModel):
    """Select option for a category; level 0 is a parent, level 1 a child"""
    id: str
    name: str
    value: str
    label: str
    slug: str
    level: int
