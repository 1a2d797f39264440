"""
Health and operational API endpoints
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Dict, List

import httpx
import psutil
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

from storefront.core.cache import cache
from storefront.core.config import config
from storefront.core.logger import logger
from storefront.db.mongodb import db

router = APIRouter()

# Track service start time
start_time = time.time()


@router.get("/health")
def health_check(request: Request):
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "timestamp": datetime.now().isoformat(),
        "version": config.api_version,
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness probe - check if service is ready to serve traffic"""
    health_checks = await perform_health_checks()

    # Only the database is required to serve traffic
    failed_checks = [check for check in health_checks if check["status"] == "unhealthy"]

    if not failed_checks:
        return {
            "status": "ready",
            "service": config.service_name,
            "timestamp": datetime.now().isoformat(),
            "checks": health_checks,
        }

    logger.warning(
        f"Readiness check failed - {len(failed_checks)} checks failed",
        metadata={
            "failed_checks": [check["name"] for check in failed_checks],
            "event": "readiness_check_failed"
        }
    )
    return JSONResponse(
        status_code=503,
        content={
            "status": "not ready",
            "service": config.service_name,
            "timestamp": datetime.now().isoformat(),
            "checks": health_checks,
            "errors": [f"{check['name']}: {check.get('error', 'Unknown error')}" for check in failed_checks],
        },
    )


@router.get("/health/live")
def liveness_check(request: Request):
    """Liveness probe - check if the app is running"""
    return {
        "status": "alive",
        "service": config.service_name,
        "timestamp": datetime.now().isoformat(),
        "uptime": time.time() - start_time,
    }


async def perform_health_checks() -> List[Dict[str, Any]]:
    """Run dependency checks concurrently"""
    results = await asyncio.gather(
        check_database_health(),
        check_cache_health(),
        check_dapr_sidecar_health(),
        check_system_resources(),
        return_exceptions=True,
    )

    checks = []
    for result in results:
        if isinstance(result, Exception):
            checks.append({
                "name": "unknown_check",
                "status": "unhealthy",
                "error": str(result),
                "timestamp": datetime.now().isoformat(),
            })
        else:
            checks.append(result)
    return checks


def _elapsed_ms(check_start: float) -> float:
    return round((time.time() - check_start) * 1000, 2)


async def check_database_health() -> Dict[str, Any]:
    """Check MongoDB connectivity"""
    check_start = time.time()

    if db.client is None:
        return {
            "name": "database",
            "status": "unhealthy",
            "error": "Database client is not connected",
            "timestamp": datetime.now().isoformat(),
        }

    try:
        await db.client.admin.command('ping')
    except PyMongoError as e:
        logger.error(
            f"Database health check failed: {e}",
            metadata={
                "response_time_ms": _elapsed_ms(check_start),
                "database_url": config.mongodb_host,
                "event": "health_check_database_failed"
            }
        )
        return {
            "name": "database",
            "status": "unhealthy",
            "error": str(e),
            "response_time_ms": _elapsed_ms(check_start),
            "timestamp": datetime.now().isoformat(),
        }

    return {
        "name": "database",
        "status": "healthy",
        "response_time_ms": _elapsed_ms(check_start),
        "database": config.mongodb_database,
        "timestamp": datetime.now().isoformat(),
    }


async def check_cache_health() -> Dict[str, Any]:
    """Check Redis connectivity; the service keeps working without the cache"""
    check_start = time.time()

    if not cache.enabled:
        return {"name": "cache", "status": "disabled", "timestamp": datetime.now().isoformat()}

    try:
        await cache.client.ping()
    except (RedisError, OSError) as e:
        logger.warning(
            f"Cache health check failed: {e}",
            metadata={"response_time_ms": _elapsed_ms(check_start), "event": "health_check_cache_failed"}
        )
        return {
            "name": "cache",
            "status": "degraded",
            "error": str(e),
            "response_time_ms": _elapsed_ms(check_start),
            "timestamp": datetime.now().isoformat(),
        }

    return {
        "name": "cache",
        "status": "healthy",
        "response_time_ms": _elapsed_ms(check_start),
        "timestamp": datetime.now().isoformat(),
    }


async def check_dapr_sidecar_health() -> Dict[str, Any]:
    """Check the Dapr sidecar used for event publishing"""
    check_start = time.time()
    health_url = f"http://localhost:{config.dapr_http_port}/v1.0/healthz"

    try:
        async with httpx.AsyncClient(timeout=3.0) as client:
            response = await client.get(health_url, headers={'Accept': 'application/json'})
    except httpx.HTTPError as e:
        logger.warning(
            f"Dapr sidecar check failed: {e}",
            metadata={
                "response_time_ms": _elapsed_ms(check_start),
                "dapr_port": config.dapr_http_port,
                "event": "health_check_dapr_failed"
            }
        )
        return {
            "name": "dapr_sidecar",
            "status": "degraded",
            "error": f"Dapr sidecar check failed: {e}",
            "response_time_ms": _elapsed_ms(check_start),
            "timestamp": datetime.now().isoformat(),
        }

    if response.status_code >= 300:
        return {
            "name": "dapr_sidecar",
            "status": "degraded",
            "error": f"Dapr returned HTTP {response.status_code}",
            "http_status": response.status_code,
            "response_time_ms": _elapsed_ms(check_start),
            "timestamp": datetime.now().isoformat(),
        }

    return {
        "name": "dapr_sidecar",
        "status": "healthy",
        "response_time_ms": _elapsed_ms(check_start),
        "dapr_http_port": config.dapr_http_port,
        "timestamp": datetime.now().isoformat(),
    }


async def check_system_resources() -> Dict[str, Any]:
    """Check memory, CPU and disk usage of the host"""
    process = psutil.Process()
    memory_info = process.memory_info()
    cpu_percent = process.cpu_percent()
    system_memory = psutil.virtual_memory()
    disk_usage = psutil.disk_usage('/')

    warnings = []
    if system_memory.percent > 90:
        warnings.append(f"High system memory usage: {system_memory.percent:.1f}%")
    if disk_usage.percent > 85:
        warnings.append(f"High disk usage: {disk_usage.percent:.1f}%")
    if cpu_percent > 95:
        warnings.append(f"High CPU usage: {cpu_percent:.1f}%")

    result = {
        "name": "system_resources",
        "status": "healthy" if not warnings else "degraded",
        "metrics": {
            "process_memory_mb": round(memory_info.rss / 1024 / 1024, 2),
            "process_cpu_percent": round(cpu_percent, 2),
            "system_memory_percent": round(system_memory.percent, 2),
            "disk_usage_percent": round(disk_usage.percent, 2),
            "uptime_seconds": round(time.time() - start_time, 2),
        },
        "timestamp": datetime.now().isoformat(),
    }
    if warnings:
        result["warnings"] = warnings
    return result
