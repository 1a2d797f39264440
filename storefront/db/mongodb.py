"""
MongoDB database connection and collection accessors
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from storefront.core.config import config
from storefront.core.errors import ErrorResponse
from storefront.core.logger import logger

PRODUCTS = "products"
CATEGORIES = "categories"
ORDERS = "orders"


class Database:
    """Database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None


db = Database()


async def connect_to_mongo():
    """Create database connection"""
    logger.info("Connecting to MongoDB...")

    try:
        db.client = AsyncIOMotorClient(config.mongodb_url)
        db.database = db.client[config.mongodb_database]

        await db.client.admin.command('ping')
        await ensure_indexes(db.database)

        logger.info(
            f"Successfully connected to MongoDB database '{config.mongodb_database}'",
            metadata={
                "event": "mongodb_connected",
                "database": config.mongodb_database,
                "host": config.mongodb_host,
                "port": config.mongodb_port
            }
        )
    except PyMongoError as e:
        logger.error(
            f"Could not connect to MongoDB: {e}",
            metadata={"event": "mongodb_connection_error", "error": str(e)}
        )
        raise ErrorResponse(f"Could not connect to MongoDB: {e}", status_code=503)


async def ensure_indexes(database: AsyncIOMotorDatabase):
    """Create the indexes the repositories rely on"""
    await database[PRODUCTS].create_indexes([
        IndexModel([("slug", ASCENDING)], unique=True, name="slug_unique"),
        IndexModel([("sku", ASCENDING)], unique=True, sparse=True, name="sku_unique"),
        IndexModel([("category_id", ASCENDING)], name="category_idx"),
        IndexModel([("is_active", ASCENDING), ("stock_quantity", ASCENDING)], name="public_listing_idx"),
    ])
    await database[CATEGORIES].create_indexes([
        IndexModel([("parent_id", ASCENDING), ("sort_order", ASCENDING)], name="parent_sort_idx"),
        IndexModel([("slug", ASCENDING)], unique=True, name="slug_unique"),
    ])
    await database[ORDERS].create_indexes([
        IndexModel([("order_number", ASCENDING)], unique=True, name="order_number_unique"),
        IndexModel([("status", ASCENDING)], name="status_idx"),
        IndexModel([("created_at", DESCENDING)], name="created_at_idx"),
    ])
    logger.info("MongoDB indexes ensured", metadata={"event": "mongodb_indexes"})


async def close_mongo_connection():
    """Close database connection"""
    logger.info("Closing connection to MongoDB...")
    if db.client is not None:
        db.client.close()
        db.client = None
        db.database = None


async def get_database() -> AsyncIOMotorDatabase:
    """Get database instance"""
    if db.database is None:
        await connect_to_mongo()
    return db.database


async def get_product_collection() -> AsyncIOMotorCollection:
    """Get products collection"""
    database = await get_database()
    return database[PRODUCTS]


async def get_category_collection() -> AsyncIOMotorCollection:
    """Get categories collection"""
    database = await get_database()
    return database[CATEGORIES]


async def get_order_collection() -> AsyncIOMotorCollection:
    """Get orders collection"""
    database = await get_database()
    return database[ORDERS]
