"""
Shared API schemas: pagination metadata and paged collections
"""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination block rendered with camelCase keys"""
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage")
    last_page: int = Field(..., alias="lastPage")
    per_page: int = Field(..., alias="perPage")
    total: int
    has_more_pages: bool = Field(..., alias="hasMorePages")

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Pagination":
        last_page = max(1, math.ceil(total / per_page)) if per_page else 1
        return cls(
            current_page=page,
            last_page=last_page,
            per_page=per_page,
            total=total,
            has_more_pages=page < last_page,
        )


class PageQuery(BaseModel):
    """Page selection shared by all listing queries"""
    page: int = Field(1, ge=1)
    per_page: int = Field(15, ge=1, le=100)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.per_page


class Page(BaseModel, Generic[T]):
    """A page of items plus its pagination block"""
    items: List[T]
    pagination: Pagination
