"""
OpenTelemetry spans for the storefront: incoming requests, MongoDB queries,
Redis cache calls and Dapr publishes. Export is left to the Dapr sidecar.
"""

from typing import List

from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor

from storefront.core.config import config
from storefront.core.logger import logger

CLIENT_INSTRUMENTORS = {
    "mongodb": PymongoInstrumentor,
    "redis": RedisInstrumentor,
    "dapr": HTTPXClientInstrumentor,
}


def instrument_app(app) -> List[str]:
    """Instrument the app and its clients; returns what was instrumented"""
    if not config.telemetry_enabled:
        logger.info("OpenTelemetry instrumentation disabled")
        return []

    instrumented = []
    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="api/health.*")
        instrumented.append("http")
    except Exception as e:
        logger.error(f"Failed to instrument FastAPI: {e}", error=e)

    for name, instrumentor in CLIENT_INSTRUMENTORS.items():
        try:
            instrumentor().instrument()
            instrumented.append(name)
        except Exception as e:
            logger.error(f"Failed to instrument {name} client: {e}", error=e)

    logger.info("OpenTelemetry instrumentation complete", metadata={"instrumented": instrumented})
    return instrumented
