"""
Product repository: catalogue CRUD, public storefront reads and cart stock checks
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from storefront.core.cache import CacheHelper
from storefront.core.errors import ErrorResponse, NotFoundError
from storefront.core.logger import logger
from storefront.models.product import Category, Product
from storefront.repositories.base import ProductRepositoryInterface
from storefront.repositories.category import CategoryRepository
from storefront.schemas.cart import CartItemValidation, CartValidationRequest, CartValidationResult
from storefront.schemas.common import Page, Pagination
from storefront.schemas.product import (
    CategoryOption,
    CategoryRef,
    ProductCreate,
    ProductIndexItem,
    ProductQuery,
    ProductResponse,
    ProductUpdate,
    PublicProductQuery,
)
from storefront.utils.text import contains_pattern, slugify

CACHE_PREFIX = "product_"
CATEGORIES_CACHE_KEY = f"{CACHE_PREFIX}categories_select"
CATEGORIES_CACHE_PATTERN = "*categories_select*"

# sort_by value -> (field, direction)
PUBLIC_SORTS = {
    "price": ("price", 1),
    "price_desc": ("price", -1),
    "created_at": ("created_at", -1),
    "name": ("name", 1),
}


def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    if value and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def product_from_document(doc: dict) -> Product:
    """Convert a MongoDB document to a Product"""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    if doc.get("category_id") is not None:
        doc["category_id"] = str(doc["category_id"])
    return Product(**doc)


def to_index_item(product: Product, category: Optional[Category]) -> ProductIndexItem:
    return ProductIndexItem(
        id=product.id,
        slug=product.slug,
        name=product.name,
        sku=product.sku,
        price=product.price,
        sale_price=product.sale_price,
        current_price=product.current_price,
        is_on_sale=product.is_on_sale,
        discount_percentage=product.discount_percentage,
        stock_quantity=product.stock_quantity,
        in_stock=product.in_stock,
        is_active=product.is_active,
        featured_image=product.image,
        category=category.name if category else None,
        short_description=product.short_description,
    )


def to_response(product: Product, category: Optional[Category]) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        slug=product.slug,
        name=product.name,
        description=product.description,
        short_description=product.short_description,
        sku=product.sku,
        price=product.price,
        sale_price=product.sale_price,
        current_price=product.current_price,
        is_on_sale=product.is_on_sale,
        discount_percentage=product.discount_percentage,
        stock_quantity=product.stock_quantity,
        in_stock=product.in_stock,
        is_active=product.is_active,
        featured_image=product.image,
        category=CategoryRef(id=category.id, name=category.name) if category else None,
    )


def build_category_options(categories: List[Category]) -> List[CategoryOption]:
    """
    Flatten the category tree into select options.

    Each root category (level 0) is followed by its children (level 1); the
    input order, by sort_order, is kept within each level. Children whose
    parent is missing or inactive are left out.
    """
    options = []
    for parent in (c for c in categories if c.is_root):
        options.append(CategoryOption(
            id=parent.id, name=parent.name, value=parent.id,
            label=parent.name, slug=parent.slug, level=0,
        ))
        for child in (c for c in categories if c.parent_id == parent.id):
            options.append(CategoryOption(
                id=child.id, name=child.name, value=child.id,
                label=child.name, slug=child.slug, level=1,
            ))
    return options


def validate_cart_line(item_id: str, requested: int, product: Optional[Product]) -> CartItemValidation:
    """Check one cart line against a product's current stock"""
    if product is None:
        return CartItemValidation(
            id=item_id, valid=False, error="Product not found",
            available_quantity=0, requested_quantity=requested,
        )

    if not product.is_available:
        return CartItemValidation(
            id=item_id, valid=False, error="Product is no longer available",
            available_quantity=0, requested_quantity=requested,
        )

    if product.stock_quantity < requested:
        return CartItemValidation(
            id=item_id, valid=False, error="Insufficient stock",
            available_quantity=product.stock_quantity, requested_quantity=requested,
        )

    return CartItemValidation(
        id=item_id, valid=True, error=None,
        available_quantity=product.stock_quantity, requested_quantity=requested,
    )


class ProductRepository(ProductRepositoryInterface):
    """MongoDB implementation of the product contract"""

    def __init__(self, collection: AsyncIOMotorCollection, categories: CategoryRepository, cache: CacheHelper):
        self.collection = collection
        self.categories = categories
        self.cache = cache

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_filters(self, query: Dict[str, Any], filters) -> Dict[str, Any]:
        """Add category, search and price filters to a MongoDB query"""
        if filters.category_id:
            query["category_id"] = filters.category_id

        if filters.search and filters.search.strip():
            pattern = contains_pattern(filters.search)
            query["$or"] = [
                {"name": pattern},
                {"description": pattern},
                {"sku": pattern},
            ]

        if filters.min_price is not None or filters.max_price is not None:
            price_query = {}
            if filters.min_price is not None:
                price_query["$gte"] = filters.min_price
            if filters.max_price is not None:
                price_query["$lte"] = filters.max_price
            query["price"] = price_query

        return query

    @staticmethod
    def _filter_params(filters, *names: str) -> Dict[str, Any]:
        """Non-empty filter values, used in cache keys"""
        values = {name: getattr(filters, name) for name in names}
        return {name: value for name, value in values.items() if value not in (None, "")}

    async def _find_page(self, query: Dict[str, Any], sort: List[tuple], page_query) -> Dict[str, Any]:
        total = await self.collection.count_documents(query)
        cursor = (
            self.collection.find(query)
            .sort(sort)
            .skip(page_query.skip)
            .limit(page_query.per_page)
        )
        docs = await cursor.to_list(length=page_query.per_page)

        products = [product_from_document(doc) for doc in docs]
        categories = await self.categories.get_many(p.category_id for p in products)
        page = Page[ProductIndexItem](
            items=[to_index_item(p, categories.get(p.category_id)) for p in products],
            pagination=Pagination.build(page_query.page, page_query.per_page, total),
        )
        return page.model_dump(mode="json", by_alias=True)

    async def _find_response(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = await self.collection.find_one(query)
        if not doc:
            return None
        product = product_from_document(doc)
        category = (await self.categories.get_many([product.category_id])).get(product.category_id)
        return to_response(product, category).model_dump(mode="json")

    async def _get_document(self, slug: str) -> dict:
        doc = await self.collection.find_one({"slug": slug})
        if not doc:
            raise NotFoundError()
        return doc

    async def _unique_slug(self, name: str) -> str:
        """Slug from the name, suffixed with -1, -2, ... until unused"""
        base = slugify(name) or "product"
        slug = base
        counter = 1
        while await self.collection.find_one({"slug": slug}, {"_id": 1}):
            slug = f"{base}-{counter}"
            counter += 1
        return slug

    async def _check_sku(self, sku: str, exclude_id: ObjectId = None):
        query = {"sku": sku}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await self.collection.find_one(query, {"_id": 1}):
            raise ErrorResponse(
                "Validation failed. Please check the form fields.",
                status_code=422,
                details={"sku": ["The sku has already been taken."]},
            )

    async def _check_category(self, category_id: str):
        if not await self.categories.exists(category_id):
            raise ErrorResponse(
                "Validation failed. Please check the form fields.",
                status_code=422,
                details={"category_id": ["The selected category id is invalid."]},
            )

    async def _invalidate(self, slug: str = None):
        if slug:
            await self.cache.clear_item(CACHE_PREFIX, slug)
        await self.cache.clear_listing(CACHE_PREFIX)
        await self.cache.clear(CATEGORIES_CACHE_PATTERN)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def index(self, query: ProductQuery) -> Page[ProductIndexItem]:
        """Admin listing, newest first"""
        filters = self._filter_params(query, "category_id", "status", "search", "min_price", "max_price")
        cache_key = CacheHelper.key(f"{CACHE_PREFIX}index", {
            "page": query.page,
            "per_page": query.per_page,
            "filters": filters,
        })

        async def load():
            mongo_query = self._apply_filters({}, query)
            if query.status:
                mongo_query["is_active"] = query.status == "active"
            return await self._find_page(mongo_query, [("created_at", -1)], query)

        try:
            data = await self.cache.remember(cache_key, load)
        except PyMongoError as e:
            logger.error(f"MongoDB error listing products: {e}", error=e)
            raise ErrorResponse("Error retrieving products", status_code=500)

        return Page[ProductIndexItem].model_validate(data)

    async def store(self, data: ProductCreate) -> ProductResponse:
        """Create a product with a unique slug derived from its name"""
        try:
            await self._check_category(data.category_id)
            await self._check_sku(data.sku)

            now = datetime.now(timezone.utc)
            doc = data.model_dump()
            doc.update({
                "slug": await self._unique_slug(data.name),
                "created_at": now,
                "updated_at": now,
            })
            result = await self.collection.insert_one(doc)
            doc["_id"] = result.inserted_id

        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key creating product: {e}")
            raise ErrorResponse("A product with this slug or SKU already exists", status_code=422)
        except PyMongoError as e:
            logger.error(f"MongoDB error creating product: {e}", error=e)
            raise ErrorResponse("Error creating product", status_code=500)

        product = product_from_document(doc)
        await self._invalidate()

        logger.info(
            f"Created product {product.slug}",
            metadata={"event": "create_product", "product_id": product.id, "slug": product.slug}
        )

        category = (await self.categories.get_many([product.category_id])).get(product.category_id)
        return to_response(product, category)

    async def show(self, key: str) -> ProductResponse:
        """Get any product, active or not, by slug"""
        cache_key = CacheHelper.key(f"{CACHE_PREFIX}show", {"slug": key})

        try:
            data = await self.cache.remember(cache_key, lambda: self._find_response({"slug": key}))
        except PyMongoError as e:
            logger.error(f"MongoDB error getting product: {e}", error=e)
            raise ErrorResponse("Error retrieving product", status_code=500)

        if data is None:
            raise NotFoundError()
        return ProductResponse.model_validate(data)

    async def update(self, key: str, data: ProductUpdate) -> ProductResponse:
        """Update the provided fields of a product; the slug never changes"""
        try:
            current = await self._get_document(key)
            update_data = data.model_dump(exclude_unset=True)

            if update_data.get("sku") and update_data["sku"] != current.get("sku"):
                await self._check_sku(update_data["sku"], exclude_id=current["_id"])
            if update_data.get("category_id") and update_data["category_id"] != current.get("category_id"):
                await self._check_category(update_data["category_id"])

            update_data["updated_at"] = datetime.now(timezone.utc)
            await self.collection.update_one({"_id": current["_id"]}, {"$set": update_data})
            updated = await self.collection.find_one({"_id": current["_id"]})

        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key updating product: {e}")
            raise ErrorResponse("A product with this SKU already exists", status_code=422)
        except PyMongoError as e:
            logger.error(f"MongoDB error updating product: {e}", error=e)
            raise ErrorResponse("Error updating product", status_code=500)

        await self._invalidate(key)

        logger.info(
            f"Updated product {key}",
            metadata={"event": "update_product", "slug": key, "fields": sorted(update_data)}
        )

        product = product_from_document(updated)
        category = (await self.categories.get_many([product.category_id])).get(product.category_id)
        return to_response(product, category)

    async def destroy(self, key: str) -> ProductResponse:
        """Permanently delete a product"""
        try:
            current = await self._get_document(key)
            await self.collection.delete_one({"_id": current["_id"]})
        except PyMongoError as e:
            logger.error(f"MongoDB error deleting product: {e}", error=e)
            raise ErrorResponse("Error deleting product", status_code=500)

        await self._invalidate(key)

        logger.info(f"Deleted product {key}", metadata={"event": "delete_product", "slug": key})

        product = product_from_document(current)
        return to_response(product, None)

    # ------------------------------------------------------------------
    # Storefront
    # ------------------------------------------------------------------

    async def get_categories_for_select(self) -> List[CategoryOption]:
        """Get categories grouped by parent and sorted for select options"""

        async def load():
            categories = await self.categories.list_active()
            return [option.model_dump() for option in build_category_options(categories)]

        try:
            data = await self.cache.remember(CATEGORIES_CACHE_KEY, load)
        except PyMongoError as e:
            logger.error(f"MongoDB error getting categories: {e}", error=e)
            raise ErrorResponse("Error retrieving categories", status_code=500)

        return [CategoryOption.model_validate(option) for option in data]

    async def get_public_products(self, query: PublicProductQuery) -> Page[ProductIndexItem]:
        """Active products with stock, filtered and sorted for the storefront"""
        filters = self._filter_params(query, "category_id", "search", "min_price", "max_price", "sort_by")
        cache_key = CacheHelper.key(f"{CACHE_PREFIX}public_index", {
            "page": query.page,
            "per_page": query.per_page,
            "filters": filters,
        })

        async def load():
            mongo_query = self._apply_filters({"is_active": True, "stock_quantity": {"$gt": 0}}, query)
            sort = PUBLIC_SORTS.get(query.sort_by, PUBLIC_SORTS["name"])
            return await self._find_page(mongo_query, [sort], query)

        try:
            data = await self.cache.remember(cache_key, load)
        except PyMongoError as e:
            logger.error(f"MongoDB error listing public products: {e}", error=e)
            raise ErrorResponse("Error retrieving products", status_code=500)

        return Page[ProductIndexItem].model_validate(data)

    async def get_public_product_by_slug(self, slug: str) -> ProductResponse:
        """Get an active product by slug"""
        cache_key = CacheHelper.key(f"{CACHE_PREFIX}public_show", {"slug": slug})

        try:
            data = await self.cache.remember(
                cache_key, lambda: self._find_response({"slug": slug, "is_active": True})
            )
        except PyMongoError as e:
            logger.error(f"MongoDB error getting public product: {e}", error=e)
            raise ErrorResponse("Error retrieving product", status_code=500)

        if data is None:
            raise NotFoundError("Product not found")
        return ProductResponse.model_validate(data)

    async def validate_cart_stock(self, request: CartValidationRequest) -> CartValidationResult:
        """Validate cart items stock availability"""
        try:
            object_ids = [oid for oid in (to_object_id(item.id) for item in request.items) if oid]
            docs = []
            if object_ids:
                docs = await self.collection.find({"_id": {"$in": object_ids}}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"MongoDB error validating cart stock: {e}", error=e)
            raise ErrorResponse("Error validating cart stock", status_code=500)

        products = {doc["_id"]: product_from_document(doc) for doc in docs}
        results = [
            validate_cart_line(item.id, item.quantity, products.get(to_object_id(item.id)))
            for item in request.items
        ]
        result = CartValidationResult(valid=all(r.valid for r in results), items=results)

        logger.info(
            result.message,
            metadata={
                "event": "validate_cart_stock",
                "items": len(results),
                "invalid": sum(1 for r in results if not r.valid),
            }
        )
        return result
