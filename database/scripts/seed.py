#!/usr/bin/env python3
"""
Storefront database seeder.

Usage:
    python database/scripts/seed.py          # clear, then seed categories and products
    python database/scripts/seed.py clear    # delete all documents
    python database/scripts/seed.py drop     # drop all collections
"""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from dotenv import load_dotenv

# Load environment variables before reading configuration
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient

from storefront.core.config import config
from storefront.db.mongodb import CATEGORIES, ORDERS, PRODUCTS, ensure_indexes
from storefront.utils.text import slugify

# (name, sort_order, children as (name, sort_order))
CATEGORY_TREE = [
    ("Casual", 1, [("Polo", 2), ("Jeans", 3), ("T-shirts", 4)]),
    ("Semi Formal", 2, [("Blazer", 1)]),
]

# (name, short_description, sku, price, sale_price, stock_quantity, is_active, category slug)
SAMPLE_PRODUCTS = [
    ("Classic Cotton T-Shirt", "Classic cotton tee for everyday comfort", "TSH-001", 19.99, 14.99, 50, True, "t-shirts"),
    ("Premium Graphic T-Shirt", "Premium tee with unique graphic design", "TSH-002", 24.99, None, 35, True, "t-shirts"),
    ("Classic Polo Shirt", "Classic pique cotton polo shirt", "POLO-001", 39.99, 29.99, 40, True, "polo"),
    ("Performance Polo Shirt", "Athletic polo with moisture-wicking fabric", "POLO-002", 49.99, None, 25, True, "polo"),
    ("Slim Fit Jeans", "Premium slim fit denim jeans", "JNS-001", 79.99, 59.99, 30, True, "jeans"),
    ("Classic Straight Jeans", "Classic straight-cut denim jeans", "JNS-002", 69.99, None, 45, True, "jeans"),
    ("Classic Navy Blazer", "Elegant navy blazer for formal occasions", "BLZ-001", 199.99, 149.99, 20, True, "blazer"),
    ("Modern Casual Blazer", "Modern blazer for smart-casual style", "BLZ-002", 179.99, None, 15, True, "blazer"),
    ("Vintage Wash T-Shirt", "Vintage-washed tee with soft feel", "TSH-003", 22.99, None, 60, True, "t-shirts"),
    ("Distressed Denim Jeans", "Trendy distressed jeans with worn details", "JNS-003", 89.99, None, 25, True, "jeans"),
    ("Limited Edition Polo", "Exclusive limited edition polo design", "POLO-LIMITED", 89.99, None, 0, True, "polo"),
    ("Discontinued Blazer", "Discontinued blazer design", "BLZ-DISC", 99.99, None, 5, False, "blazer"),
]


class StorefrontDatabaseSeeder:
    def __init__(self):
        self.mongodb_url = config.mongodb_url
        self.db_name = config.mongodb_database
        self.client = None
        self.db = None

    async def connect(self):
        """Establish MongoDB connection"""
        print(f"Connecting to MongoDB database '{self.db_name}'...")
        self.client = AsyncIOMotorClient(self.mongodb_url)
        self.db = self.client[self.db_name]

        # Test connection
        await self.db.command('ping')
        print("Successfully connected to MongoDB!")

    async def seed_data(self):
        """Main seeding method"""
        print("Seeding storefront data...")

        await self.clear_data()
        await ensure_indexes(self.db)
        category_ids = await self.seed_categories()
        await self.seed_products(category_ids)

        print("Storefront data seeding completed successfully!")

    async def clear_data(self):
        """Delete every document from the storefront collections"""
        for name in (ORDERS, PRODUCTS, CATEGORIES):
            result = await self.db[name].delete_many({})
            print(f"Deleted {result.deleted_count} documents from '{name}' collection")

    async def drop_collections(self):
        for name in (ORDERS, PRODUCTS, CATEGORIES):
            await self.db[name].drop()
            print(f"Dropped collection: {name}")

    async def seed_categories(self) -> dict:
        """Insert the category tree; returns slug -> id"""
        category_ids = {}
        for name, sort_order, children in CATEGORY_TREE:
            result = await self.db[CATEGORIES].insert_one({
                "name": name,
                "slug": slugify(name),
                "parent_id": None,
                "is_active": True,
                "sort_order": sort_order,
            })
            parent_id = str(result.inserted_id)
            category_ids[slugify(name)] = parent_id

            for child_name, child_order in children:
                result = await self.db[CATEGORIES].insert_one({
                    "name": child_name,
                    "slug": slugify(child_name),
                    "parent_id": parent_id,
                    "is_active": True,
                    "sort_order": child_order,
                })
                category_ids[slugify(child_name)] = str(result.inserted_id)

        print(f"Seeded {len(category_ids)} categories")
        return category_ids

    async def seed_products(self, category_ids: dict):
        now = datetime.now(timezone.utc)
        products = []
        for name, short_description, sku, price, sale_price, stock, is_active, category in SAMPLE_PRODUCTS:
            products.append({
                "name": name,
                "slug": slugify(name),
                "description": f"{short_description}.",
                "short_description": short_description,
                "sku": sku,
                "price": price,
                "sale_price": sale_price,
                "stock_quantity": stock,
                "in_stock": stock > 0,
                "is_active": is_active,
                "image": None,
                "category_id": category_ids[category],
                "created_at": now,
                "updated_at": now,
            })

        result = await self.db[PRODUCTS].insert_many(products)
        print(f"Seeded {len(result.inserted_ids)} products")

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            print("MongoDB connection closed")


async def main():
    seeder = StorefrontDatabaseSeeder()
    operation = sys.argv[1] if len(sys.argv) > 1 else "seed"

    try:
        print("=" * 50)
        print("Storefront Database Seeder")
        print("=" * 50)

        await seeder.connect()

        if operation == "drop":
            await seeder.drop_collections()
        elif operation == "clear":
            await seeder.clear_data()
        else:
            await seeder.seed_data()

        print("=" * 50)
        print(f"Storefront database {operation} completed!")
        print("=" * 50)
    except Exception as error:
        print(f"Storefront database {operation} failed: {error}")
        sys.exit(1)
    finally:
        await seeder.close()


if __name__ == "__main__":
    asyncio.run(main())
