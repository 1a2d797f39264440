"""Unit tests for ProductRepository"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo.errors import PyMongoError

from storefront.core.errors import ErrorResponse, NotFoundError
from storefront.models.product import Category
from storefront.repositories.category import CategoryRepository
from storefront.repositories.product import ProductRepository, build_category_options
from storefront.schemas.cart import CartValidationRequest
from storefront.schemas.product import ProductCreate, ProductQuery, ProductUpdate, PublicProductQuery

from conftest import CATEGORY_ID, CHILD_CATEGORY_ID, OTHER_PRODUCT_ID, PRODUCT_ID


@pytest.fixture
def repository(products_collection, categories_collection, disabled_cache):
    return ProductRepository(products_collection, CategoryRepository(categories_collection), disabled_cache)


class TestCategoryOptions:
    """Test flattening of the category tree"""

    def test_parents_followed_by_children(self):
        categories = [
            Category(id="1", name="Casual", slug="casual", sort_order=1),
            Category(id="5", name="Semi Formal", slug="semi-formal", sort_order=2),
            Category(id="6", name="Blazer", slug="blazer", parent_id="5", sort_order=1),
            Category(id="2", name="Polo", slug="polo", parent_id="1", sort_order=2),
            Category(id="3", name="Jeans", slug="jeans", parent_id="1", sort_order=3),
        ]

        options = build_category_options(categories)

        assert [(o.name, o.level) for o in options] == [
            ("Casual", 0), ("Polo", 1), ("Jeans", 1),
            ("Semi Formal", 0), ("Blazer", 1),
        ]
        assert options[1].value == "2"
        assert options[1].label == "Polo"

    def test_orphan_children_are_skipped(self):
        categories = [Category(id="2", name="Polo", slug="polo", parent_id="99")]

        assert build_category_options(categories) == []

    @pytest.mark.asyncio
    async def test_get_categories_for_select(self, repository, categories_collection, cursor_of):
        categories_collection.find.return_value = cursor_of([
            {"_id": ObjectId(CATEGORY_ID), "name": "Casual", "slug": "casual",
             "parent_id": None, "is_active": True, "sort_order": 1},
            {"_id": ObjectId(CHILD_CATEGORY_ID), "name": "Polo", "slug": "polo",
             "parent_id": CATEGORY_ID, "is_active": True, "sort_order": 2},
        ])

        options = await repository.get_categories_for_select()

        categories_collection.find.assert_called_once_with({"is_active": True})
        assert [(o.id, o.level) for o in options] == [(CATEGORY_ID, 0), (CHILD_CATEGORY_ID, 1)]


class TestPublicProducts:
    """Test storefront listing and detail"""

    @pytest.mark.asyncio
    async def test_only_active_products_with_stock(
        self, repository, products_collection, categories_collection, cursor_of, product_doc, category_doc
    ):
        cursor = cursor_of([product_doc])
        products_collection.find.return_value = cursor
        products_collection.count_documents.return_value = 1
        categories_collection.find.return_value = cursor_of([category_doc])

        page = await repository.get_public_products(PublicProductQuery(sort_by="price_desc"))

        query = products_collection.find.call_args[0][0]
        assert query["is_active"] is True
        assert query["stock_quantity"] == {"$gt": 0}
        cursor.sort.assert_called_once_with([("price", -1)])
        cursor.limit.assert_called_once_with(12)

        item = page.items[0]
        assert item.current_price == 29.99
        assert item.is_on_sale is True
        assert item.discount_percentage == 25
        assert item.category == "Polo"
        assert page.pagination.per_page == 12
        assert page.pagination.has_more_pages is False

    @pytest.mark.asyncio
    async def test_unknown_sort_uses_name(self, repository, products_collection, cursor_of):
        cursor = cursor_of([])
        products_collection.find.return_value = cursor

        await repository.get_public_products(PublicProductQuery(sort_by="rating"))

        cursor.sort.assert_called_once_with([("name", 1)])

    @pytest.mark.asyncio
    async def test_search_and_price_filters(self, repository, products_collection, cursor_of):
        products_collection.find.return_value = cursor_of([])

        await repository.get_public_products(PublicProductQuery(
            search="polo", min_price=10, max_price=50, category_id=CHILD_CATEGORY_ID,
        ))

        query = products_collection.find.call_args[0][0]
        assert query["category_id"] == CHILD_CATEGORY_ID
        assert query["price"] == {"$gte": 10, "$lte": 50}
        assert {"sku": {"$regex": "polo", "$options": "i"}} in query["$or"]

    @pytest.mark.asyncio
    async def test_public_product_by_slug(self, repository, products_collection, product_doc):
        products_collection.find_one.return_value = product_doc

        product = await repository.get_public_product_by_slug("classic-polo-shirt")

        products_collection.find_one.assert_awaited_once_with({"slug": "classic-polo-shirt", "is_active": True})
        assert product.id == PRODUCT_ID
        assert product.category is None

    @pytest.mark.asyncio
    async def test_public_product_not_found(self, repository, products_collection):
        products_collection.find_one.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await repository.get_public_product_by_slug("missing")

        assert exc_info.value.message == "Product not found"

    @pytest.mark.asyncio
    async def test_database_error(self, repository, products_collection):
        products_collection.count_documents.side_effect = PyMongoError("down")

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.get_public_products(PublicProductQuery())

        assert exc_info.value.status_code == 500


class TestCartValidation:
    """Test cart stock validation"""

    @pytest.mark.asyncio
    async def test_all_items_available(self, repository, products_collection, cursor_of, product_doc):
        products_collection.find.return_value = cursor_of([product_doc])

        result = await repository.validate_cart_stock(
            CartValidationRequest(items=[{"id": PRODUCT_ID, "quantity": 40}])
        )

        assert result.valid is True
        assert result.message == "All items are available"
        assert result.items[0].error is None
        assert result.items[0].available_quantity == 40

    @pytest.mark.asyncio
    async def test_each_failure_reported(
        self, repository, products_collection, cursor_of, product_doc, other_product_doc
    ):
        inactive = {**product_doc, "is_active": False}
        products_collection.find.return_value = cursor_of([inactive, other_product_doc])
        missing_id = str(ObjectId())

        result = await repository.validate_cart_stock(CartValidationRequest(items=[
            {"id": missing_id, "quantity": 1},
            {"id": PRODUCT_ID, "quantity": 1},
            {"id": OTHER_PRODUCT_ID, "quantity": 5},
        ]))

        assert result.valid is False
        assert result.message == "Some items have stock issues"
        assert [(i.error, i.available_quantity) for i in result.items] == [
            ("Product not found", 0),
            ("Product is no longer available", 0),
            ("Insufficient stock", 2),
        ]
        assert result.items[2].requested_quantity == 5

    @pytest.mark.asyncio
    async def test_invalid_ids_are_not_found(self, repository, products_collection):
        result = await repository.validate_cart_stock(
            CartValidationRequest(items=[{"id": "not-an-object-id", "quantity": 1}])
        )

        products_collection.find.assert_not_called()
        assert result.items[0].error == "Product not found"

    @pytest.mark.asyncio
    async def test_upper_case_id_matches_product(self, repository, products_collection, cursor_of, product_doc):
        products_collection.find.return_value = cursor_of([product_doc])

        result = await repository.validate_cart_stock(
            CartValidationRequest(items=[{"id": PRODUCT_ID.upper(), "quantity": 1}])
        )

        assert result.valid is True
        assert result.items[0].id == PRODUCT_ID.upper()
        assert result.items[0].available_quantity == 40


class TestProductCrud:
    """Test admin product management"""

    @pytest.fixture
    def product_create(self):
        return ProductCreate(
            name="Classic Polo Shirt",
            sku="POLO-001",
            price=39.99,
            stock_quantity=10,
            category_id=CHILD_CATEGORY_ID,
        )

    @pytest.mark.asyncio
    async def test_index_status_filter(self, repository, products_collection, cursor_of):
        cursor = cursor_of([])
        products_collection.find.return_value = cursor

        page = await repository.index(ProductQuery(status="inactive"))

        assert products_collection.find.call_args[0][0] == {"is_active": False}
        cursor.sort.assert_called_once_with([("created_at", -1)])
        assert page.pagination.per_page == 15
        assert page.pagination.last_page == 1

    @pytest.mark.asyncio
    async def test_store_generates_unique_slug(
        self, repository, products_collection, categories_collection, product_create, category_doc
    ):
        categories_collection.find_one.return_value = category_doc

        async def find_one(query, *args):
            # sku is free, base slug is taken
            return {"_id": ObjectId()} if query == {"slug": "classic-polo-shirt"} else None

        products_collection.find_one = AsyncMock(side_effect=find_one)
        products_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId(PRODUCT_ID))
        categories_collection.find.return_value.to_list.return_value = [category_doc]

        product = await repository.store(product_create)

        inserted = products_collection.insert_one.call_args[0][0]
        assert inserted["slug"] == "classic-polo-shirt-1"
        assert product.slug == "classic-polo-shirt-1"
        assert product.category.name == "Polo"

    @pytest.mark.asyncio
    async def test_store_duplicate_sku(
        self, repository, products_collection, categories_collection, product_create, category_doc
    ):
        categories_collection.find_one.return_value = category_doc
        products_collection.find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.store(product_create)

        assert exc_info.value.status_code == 422
        assert exc_info.value.details == {"sku": ["The sku has already been taken."]}
        products_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_unknown_category(self, repository, categories_collection, product_create):
        categories_collection.find_one.return_value = None

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.store(product_create)

        assert "category_id" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_update_keeps_slug(self, repository, products_collection, product_doc):
        products_collection.find_one.side_effect = [product_doc, {**product_doc, "name": "Renamed Polo"}]

        product = await repository.update("classic-polo-shirt", ProductUpdate(name="Renamed Polo"))

        changes = products_collection.update_one.call_args[0][1]["$set"]
        assert changes["name"] == "Renamed Polo"
        assert "slug" not in changes
        assert "price" not in changes
        assert product.slug == "classic-polo-shirt"

    @pytest.mark.asyncio
    async def test_show_missing_product(self, repository, products_collection):
        products_collection.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await repository.show("missing")

    @pytest.mark.asyncio
    async def test_destroy(self, repository, products_collection, product_doc):
        products_collection.find_one.return_value = product_doc

        product = await repository.destroy("classic-polo-shirt")

        products_collection.delete_one.assert_awaited_once_with({"_id": product_doc["_id"]})
        assert product.slug == "classic-polo-shirt"
