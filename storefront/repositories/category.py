"""
Category repository for the category tree
"""

from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

from storefront.models.product import Category


def category_from_document(doc: dict) -> Category:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    if doc.get("parent_id") is not None:
        doc["parent_id"] = str(doc["parent_id"])
    return Category(**doc)


class CategoryRepository:
    """Read access to categories"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def list_active(self) -> List[Category]:
        """All active categories ordered by sort_order"""
        cursor = self.collection.find({"is_active": True}).sort("sort_order", 1)
        docs = await cursor.to_list(length=None)
        return [category_from_document(doc) for doc in docs]

    async def get_many(self, category_ids: Iterable[Optional[str]]) -> Dict[str, Category]:
        """Fetch categories by id, keyed by id"""
        object_ids = [ObjectId(cid) for cid in set(category_ids) if cid and ObjectId.is_valid(cid)]
        if not object_ids:
            return {}

        docs = await self.collection.find({"_id": {"$in": object_ids}}).to_list(length=None)
        categories = [category_from_document(doc) for doc in docs]
        return {category.id: category for category in categories}

    async def exists(self, category_id: str) -> bool:
        if not category_id or not ObjectId.is_valid(category_id):
            return False
        return await self.collection.find_one({"_id": ObjectId(category_id)}) is not None
