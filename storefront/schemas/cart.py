"""
API schemas for cart stock validation
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class CartItem(BaseModel):
    """A cart line: product id and requested quantity"""
    id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=100)


class CartValidationRequest(BaseModel):
    items: List[CartItem] = Field(default_factory=list, max_length=50)


class CartItemValidation(BaseModel):
    id: str
    valid: bool
    error: Optional[str] = None
    available_quantity: int
    requested_quantity: int


class CartValidationResult(BaseModel):
    valid: bool
    items: List[CartItemValidation]

    @property
    def message(self) -> str:
        return "All items are available" if self.valid else "Some items have stock issues"
