"""
Core module initialization
"""

from .config import config
from .logger import logger
from .errors import ErrorResponse, NotFoundError
from .responses import ApiResponse
from .cache import CacheHelper, cache

__all__ = [
    "config",
    "logger",
    "ErrorResponse",
    "NotFoundError",
    "ApiResponse",
    "CacheHelper",
    "cache",
]
