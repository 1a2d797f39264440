"""Shared test fixtures"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime, timezone
from bson import ObjectId

from storefront.core.cache import CacheHelper


CATEGORY_ID = "64b000000000000000000001"
CHILD_CATEGORY_ID = "64b000000000000000000002"
PRODUCT_ID = "507f1f77bcf86cd799439011"
OTHER_PRODUCT_ID = "507f1f77bcf86cd799439022"


def make_cursor(docs):
    """Mock Motor cursor supporting sort/skip/limit chaining"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


def make_collection():
    """Mock Motor collection; find() returns an empty cursor by default"""
    collection = MagicMock()
    collection.find.return_value = make_cursor([])
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    return collection


@pytest.fixture
def products_collection():
    return make_collection()


@pytest.fixture
def categories_collection():
    return make_collection()


@pytest.fixture
def orders_collection():
    return make_collection()


@pytest.fixture
def disabled_cache():
    """Cache helper that always calls the loader"""
    return CacheHelper(enabled=False)


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.publish_order_created = AsyncMock(return_value=True)
    return publisher


@pytest.fixture
def category_doc():
    return {
        "_id": ObjectId(CHILD_CATEGORY_ID),
        "name": "Polo",
        "slug": "polo",
        "parent_id": CATEGORY_ID,
        "is_active": True,
        "sort_order": 2,
    }


@pytest.fixture
def product_doc():
    """Active product on sale with stock"""
    return {
        "_id": ObjectId(PRODUCT_ID),
        "name": "Classic Polo Shirt",
        "slug": "classic-polo-shirt",
        "description": "Timeless polo shirt made from breathable pique cotton.",
        "short_description": "Classic pique cotton polo shirt",
        "sku": "POLO-001",
        "price": 39.99,
        "sale_price": 29.99,
        "stock_quantity": 40,
        "in_stock": True,
        "is_active": True,
        "image": None,
        "category_id": CHILD_CATEGORY_ID,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def other_product_doc():
    """Active product without a sale price"""
    return {
        "_id": ObjectId(OTHER_PRODUCT_ID),
        "name": "Slim Fit Jeans",
        "slug": "slim-fit-jeans",
        "description": None,
        "short_description": None,
        "sku": "JNS-001",
        "price": 80.00,
        "sale_price": None,
        "stock_quantity": 2,
        "in_stock": True,
        "is_active": True,
        "image": None,
        "category_id": CHILD_CATEGORY_ID,
        "created_at": datetime(2024, 1, 2, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 2, tzinfo=timezone.utc),
    }


@pytest.fixture
def billing_address():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "0123456789",
        "address": "12 Market Street",
        "city": "Springfield",
        "state": "Oregon",
        "zip": "97403",
        "country": "USA",
    }


@pytest.fixture
def order_doc(billing_address):
    return {
        "_id": ObjectId("65c000000000000000000001"),
        "order_number": "ORD-ABC123DEF4567",
        "status": "pending",
        "subtotal": 100.0,
        "tax_amount": 8.0,
        "shipping_amount": 15.0,
        "discount_amount": 0.0,
        "total_amount": 123.0,
        "currency": "USD",
        "billing_address": billing_address,
        "shipping_address": billing_address,
        "notes": "",
        "items": [
            {
                "product_id": PRODUCT_ID,
                "product_name": "Classic Polo Shirt",
                "product_sku": "POLO-001",
                "price": 50.0,
                "quantity": 2,
                "total": 100.0,
            }
        ],
        "created_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "shipped_at": None,
        "delivered_at": None,
    }


@pytest.fixture
def cursor_of():
    """Factory for mock cursors over a list of documents"""
    return make_cursor
