"""
FastAPI Application - Storefront Service
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api import admin_orders, admin_products, health, public
from storefront.core.cache import cache
from storefront.core.config import config
from storefront.core.errors import (
    ErrorResponse,
    error_response_handler,
    http_exception_handler,
    rate_limit_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from storefront.core.logger import logger
from storefront.core.rate_limit import limiter
from storefront.core.telemetry import instrument_app
from storefront.db.mongodb import close_mongo_connection, connect_to_mongo
from storefront.middleware import TraceContextMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Storefront Service...")
    await connect_to_mongo()

    logger.info(
        "Storefront Service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    yield

    # Shutdown
    logger.info("Shutting down Storefront Service...")
    await cache.close()
    await close_mongo_connection()


app = FastAPI(
    title="Storefront Service",
    description="Product catalogue, cart validation and checkout for the storefront",
    version=config.service_version,
    lifespan=lifespan
)

# Instrument app with OpenTelemetry for automatic tracing
instrument_app(app)

# Configure error handlers
app.add_exception_handler(ErrorResponse, error_response_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Add W3C Trace Context middleware
app.add_middleware(TraceContextMiddleware)

# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(public.router, prefix="/api/public", tags=["storefront"])
app.include_router(admin_products.router, prefix="/api/admin/products", tags=["admin-products"])
app.include_router(admin_orders.router, prefix="/api/admin/orders", tags=["admin-orders"])


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
